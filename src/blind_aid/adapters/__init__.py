"""Adapters for external collaborators (question answering)."""

from .answer_service import AnswerRequest, AnswerResponse, AnswerServiceError, EchoAnswerService, HttpAnswerService

__all__ = [
    "AnswerRequest",
    "AnswerResponse",
    "AnswerServiceError",
    "EchoAnswerService",
    "HttpAnswerService",
]
