"""Speech-to-text session management: at most one listening session at a time."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from blind_aid.models import Severity

from .cancellation import CancellationToken
from .interfaces import Notifier, RecognitionEngine
from .output import UtterancePlayer
from .status import StatusMachine, VoiceStatus

SUPPRESSED_ERRORS = frozenset({"no-speech"})
SELF_INITIATED_ERRORS = frozenset({"aborted"})


class RecognitionSession:
    """Callback receiver for one engine session.

    The session resolves at most once: the first result or error wins and
    everything the engine reports afterwards is dropped.
    """

    def __init__(self, manager: RecognitionSessionManager) -> None:
        self._manager = manager
        self.token = CancellationToken()
        self.stop_requested = False

    def on_start(self) -> None:
        self._manager._handle_start(self)

    def on_result(self, text: str) -> None:
        self._manager._handle_result(self, text)

    def on_error(self, kind: str) -> None:
        self._manager._handle_error(self, kind)

    def on_end(self) -> None:
        self._manager._handle_end(self)


class RecognitionSessionManager:
    """Wraps a speech-to-text engine and drives status through a listening session."""

    def __init__(
        self,
        engine: RecognitionEngine,
        status: StatusMachine,
        player: UtterancePlayer,
        notifier: Notifier,
        *,
        on_transcript: Callable[[str], None],
        timeout_seconds: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._status = status
        self._player = player
        self._notifier = notifier
        self._on_transcript = on_transcript
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("blind_aid.voice.recognition")

        self._supported = bool(engine.supported)
        self._session: RecognitionSession | None = None
        self._watchdog: asyncio.TimerHandle | None = None
        self._transcript = ""

        if not self._supported:
            self._logger.warning("speech_recognition_unsupported")

    @property
    def is_supported(self) -> bool:
        return self._supported

    @property
    def transcript(self) -> str:
        return self._transcript

    def start(self) -> bool:
        """Open a listening session; returns ``False`` when the request is a no-op."""
        if not self._supported:
            return False
        if self._status.current not in (VoiceStatus.IDLE, VoiceStatus.SPEAKING):
            self._logger.debug("recognition_start_ignored", extra={"status": self._status.current.value})
            return False

        self._player.cancel()
        self._status.activate()
        self._transcript = ""

        session = RecognitionSession(self)
        self._session = session
        self._logger.info("recognition_started", extra={"session_id": session.token.id})

        try:
            self._engine.start(session)
        except Exception as exc:  # noqa: BLE001 - surface engine start failures as hard errors.
            self._logger.exception("recognition_start_failed", extra={"session_id": session.token.id})
            if session.token.resolve():
                self._close(session)
                self._notify_error(type(exc).__name__)
                self._status.try_transition(VoiceStatus.IDLE)
            return False

        if self._timeout_seconds and session.token.live:
            loop = asyncio.get_running_loop()
            self._watchdog = loop.call_later(self._timeout_seconds, self._handle_timeout, session)
        return True

    def stop(self) -> bool:
        """Ask the engine to end the live session; status follows its callback."""
        session = self._session
        if session is None or not session.token.live or self._status.current != VoiceStatus.LISTENING:
            return False

        session.stop_requested = True
        self._logger.info("recognition_stop_requested", extra={"session_id": session.token.id})
        self._engine.stop()
        return True

    def abort(self) -> None:
        """End the live session immediately; later engine callbacks are ignored."""
        session = self._session
        if session is None or not session.token.live:
            return

        session.stop_requested = True
        session.token.cancel()
        self._close(session)
        self._logger.info("recognition_aborted", extra={"session_id": session.token.id})
        try:
            self._engine.stop()
        except Exception:  # noqa: BLE001
            self._logger.exception("recognition_stop_failed")
        if self._status.current == VoiceStatus.LISTENING:
            self._status.try_transition(VoiceStatus.IDLE)

    def _handle_start(self, session: RecognitionSession) -> None:
        if session is self._session and session.token.live:
            self._logger.debug("recognition_engine_started", extra={"session_id": session.token.id})

    def _handle_result(self, session: RecognitionSession, text: str) -> None:
        if session is not self._session or not session.token.resolve():
            return

        self._close(session)
        self._transcript = text.strip()
        self._logger.info("recognition_result", extra={"session_id": session.token.id, "transcript": self._transcript})
        if not self._status.try_transition(VoiceStatus.PROCESSING):
            return

        try:
            self._on_transcript(self._transcript)
        except Exception:  # noqa: BLE001 - a failed dispatch must not leave us processing.
            self._logger.exception("transcript_handler_failed", extra={"session_id": session.token.id})
            self._status.reset()

    def _handle_error(self, session: RecognitionSession, kind: str) -> None:
        if session is not self._session or not session.token.resolve():
            return

        self._close(session)
        expected = kind in SUPPRESSED_ERRORS or (kind in SELF_INITIATED_ERRORS and session.stop_requested)
        if expected:
            self._logger.info("recognition_ended_quietly", extra={"session_id": session.token.id, "kind": kind})
        else:
            self._logger.warning("recognition_error", extra={"session_id": session.token.id, "kind": kind})
            self._notify_error(kind)

        if self._status.current == VoiceStatus.LISTENING:
            self._status.try_transition(VoiceStatus.IDLE)

    def _handle_end(self, session: RecognitionSession) -> None:
        if session is not self._session or not session.token.resolve():
            return

        self._close(session)
        self._logger.info("recognition_ended_without_result", extra={"session_id": session.token.id})
        if self._status.current == VoiceStatus.LISTENING:
            self._status.try_transition(VoiceStatus.IDLE)

    def _handle_timeout(self, session: RecognitionSession) -> None:
        self._watchdog = None
        if session is not self._session or not session.token.live:
            return
        self._logger.warning("recognition_timed_out", extra={"session_id": session.token.id})
        self.abort()

    def _close(self, session: RecognitionSession) -> None:
        if self._session is session:
            self._session = None
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    def _notify_error(self, kind: str) -> None:
        self._notifier.notify(
            "Voice Error",
            f"Could not understand. Error: {kind}",
            Severity.DESTRUCTIVE,
        )
