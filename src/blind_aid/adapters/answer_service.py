"""Question-answering adapters.

The voice core only needs ``answer(query) -> response``. The HTTP adapter
talks to any service that accepts ``{"query": ...}`` and replies with
``{"response": ...}``; which AI provider sits behind it is not our concern.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError


class AnswerServiceError(RuntimeError):
    """Raised when the answering service cannot produce a response."""


class AnswerRequest(BaseModel):
    query: str


class AnswerResponse(BaseModel):
    response: str


class HttpAnswerService:
    """POSTs questions to a JSON endpoint with ``httpx``."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
        self._logger = logger or logging.getLogger("blind_aid.adapters.answer_service")

    async def answer(self, query: str) -> str:
        payload = AnswerRequest(query=query).model_dump()
        try:
            response = await self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AnswerServiceError(f"Answer service request failed: {exc}") from exc

        try:
            parsed = AnswerResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AnswerServiceError("Answer service returned an unexpected payload") from exc

        self._logger.debug("answer_received", extra={"status_code": response.status_code})
        return parsed.response

    async def aclose(self) -> None:
        await self._client.aclose()


class EchoAnswerService:
    """Offline fallback used for local demos and tests."""

    async def answer(self, query: str) -> str:
        return f"You asked: {query}. No answering service is configured."
