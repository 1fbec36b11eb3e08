"""Executes classified voice actions."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from blind_aid.models import Screen, Severity, VoiceAction, VoiceActionType

from .interfaces import AnswerService, Navigator, Notifier
from .output import UtterancePlayer
from .status import StatusMachine

NAVIGATION_CONFIRMATIONS: dict[Screen, str] = {
    Screen.OBJECT_DETECTION: "Navigating to Object Detection.",
    Screen.EMERGENCY: "Navigating to Emergency SOS.",
    Screen.DASHBOARD: "Returning to dashboard.",
    Screen.SETTINGS: "Opening Settings.",
}
CANCEL_CONFIRMATION = "Cancelling SOS."
ANSWER_APOLOGY = "Sorry, I couldn't get an answer right now. Please try again."
EMPTY_ANSWER_FALLBACK = "I don't have an answer for that."


class CommandDispatcher:
    """Runs navigation synchronously and AI questions as an asyncio task."""

    def __init__(
        self,
        *,
        player: UtterancePlayer,
        status: StatusMachine,
        answer_service: AnswerService,
        notifier: Notifier,
        answer_timeout_seconds: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._player = player
        self._status = status
        self._answer_service = answer_service
        self._notifier = notifier
        self._answer_timeout_seconds = answer_timeout_seconds
        self._logger = logger or logging.getLogger("blind_aid.voice.command_handler")

        self._navigator: Navigator | None = None
        self._cancel_handlers: list[Callable[[], None]] = []
        self._pending: asyncio.Task[None] | None = None

    @property
    def pending(self) -> asyncio.Task[None] | None:
        """The in-flight AI query, if any."""
        if self._pending is not None and self._pending.done():
            return None
        return self._pending

    def set_navigator(self, navigator: Navigator) -> None:
        if self._navigator is not None:
            self._logger.info("navigator_replaced")
        self._navigator = navigator

    def add_cancel_handler(self, handler: Callable[[], None]) -> Callable[[], None]:
        """Register a screen-local cancel hook and return a callable that removes it."""
        self._cancel_handlers.append(handler)

        def _remove() -> None:
            if handler in self._cancel_handlers:
                self._cancel_handlers.remove(handler)

        return _remove

    def dispatch(self, action: VoiceAction) -> asyncio.Task[None] | None:
        """Execute ``action``; returns the AI query task for ``ANSWER_QUERY``."""
        self._logger.info("dispatch_action", extra={"action": action.type.value, "text": action.text})

        if action.type == VoiceActionType.NAVIGATE and action.screen is not None:
            self._navigate(action.screen)
            return None

        if action.type == VoiceActionType.CANCEL_SOS:
            self._cancel_sos()
            return None

        if action.type == VoiceActionType.ANSWER_QUERY and action.text.strip():
            self._pending = asyncio.get_running_loop().create_task(
                self._answer(action.text),
                name="voice-answer-query",
            )
            return self._pending

        self._unknown(action.text)
        return None

    async def drain(self) -> None:
        """Wait for the in-flight AI query, if any, to resolve."""
        pending = self.pending
        if pending is not None:
            await pending

    async def cancel_pending(self) -> None:
        """Cancel the in-flight AI query and fall back to idle."""
        pending = self.pending
        if pending is None:
            return

        pending.cancel()
        try:
            await pending
        except asyncio.CancelledError:
            pass
        finally:
            self._pending = None
        self._status.reset()

    def _navigate(self, screen: Screen) -> None:
        if self._navigator is None:
            self._logger.warning("navigator_not_registered", extra={"screen": screen.value})
        else:
            try:
                self._navigator(screen)
            except Exception:  # noqa: BLE001 - host navigation failures are reported, not raised.
                self._logger.exception("navigation_failed", extra={"screen": screen.value})
                self._notifier.notify("Navigation Error", f"Could not open {screen.display_name}.", Severity.DESTRUCTIVE)
                self._player.speak(f"Sorry, I couldn't open {screen.display_name}.")
                return

        self._player.speak(NAVIGATION_CONFIRMATIONS[screen])

    def _cancel_sos(self) -> None:
        for handler in list(self._cancel_handlers):
            try:
                handler()
            except Exception:  # noqa: BLE001
                self._logger.exception("cancel_handler_failed")
        self._player.speak(CANCEL_CONFIRMATION)

    async def _answer(self, query: str) -> None:
        try:
            if self._answer_timeout_seconds:
                response = await asyncio.wait_for(
                    self._answer_service.answer(query),
                    timeout=self._answer_timeout_seconds,
                )
            else:
                response = await self._answer_service.answer(query)
        except asyncio.CancelledError:
            self._logger.info("answer_query_cancelled", extra={"query": query})
            raise
        except asyncio.TimeoutError:
            self._logger.warning(
                "answer_query_timeout",
                extra={"query": query, "timeout_seconds": self._answer_timeout_seconds},
            )
            self._answer_failed(f"No answer after {self._answer_timeout_seconds}s")
            return
        except Exception as exc:  # noqa: BLE001 - any collaborator failure becomes a spoken apology.
            self._logger.exception("answer_query_failed", extra={"query": query})
            self._answer_failed(f"{type(exc).__name__}: {exc}")
            return

        answer = (response or "").strip()
        self._logger.info("answer_query_succeeded", extra={"query": query, "chars": len(answer)})
        self._player.speak(answer or EMPTY_ANSWER_FALLBACK)

    def _answer_failed(self, description: str) -> None:
        self._notifier.notify("AI Error", description, Severity.DESTRUCTIVE)
        self._player.speak(ANSWER_APOLOGY)

    def _unknown(self, text: str) -> None:
        self._notifier.notify("Unknown Command", f'You said: "{text}"', Severity.INFO)
        self._player.speak(f"Sorry, I didn't understand the command '{text}'.")
