"""Text-to-speech orchestration with single-utterance pre-emption."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from .cancellation import CancellationToken
from .interfaces import SynthesisEngine
from .status import StatusMachine, VoiceStatus


@dataclass(slots=True)
class VoiceOutputConfig:
    """Configurable controls for response speech."""

    enabled: bool = True
    max_chars: int = 500
    speak_delay_seconds: float = 0.05
    retry_delay_seconds: float = 0.1
    max_retries: int = 1


@dataclass(slots=True)
class Utterance:
    """One unit of synthesized speech and its completion hook."""

    text: str
    on_complete: Callable[[], None] | None = None
    advance_status: bool = True
    token: CancellationToken = field(default_factory=CancellationToken)
    attempts: int = 0


class _UtteranceCallbacks:
    """Engine callbacks bound to one attempt of one utterance."""

    def __init__(self, player: UtterancePlayer, utterance: Utterance, attempt: int) -> None:
        self._player = player
        self._utterance = utterance
        self._attempt = attempt

    def on_start(self) -> None:
        self._player._handle_start(self._utterance, self._attempt)

    def on_end(self) -> None:
        self._player._handle_end(self._utterance, self._attempt)

    def on_error(self, kind: str) -> None:
        self._player._handle_error(self._utterance, self._attempt, kind)


class UtterancePlayer:
    """Speaks one utterance at a time; the most recent ``speak()`` always wins."""

    def __init__(
        self,
        engine: SynthesisEngine,
        status: StatusMachine,
        config: VoiceOutputConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._status = status
        self._config = config or VoiceOutputConfig()
        self._logger = logger or logging.getLogger("blind_aid.voice.output")
        self._current: Utterance | None = None
        self._pending: asyncio.Handle | None = None

    @property
    def config(self) -> VoiceOutputConfig:
        return self._config

    @property
    def speaking(self) -> bool:
        """Whether an utterance is scheduled or playing."""
        return self._current is not None

    def speak(
        self,
        text: str,
        on_complete: Callable[[], None] | None = None,
        *,
        advance_status: bool = True,
    ) -> Utterance | None:
        """Pre-empt current speech and speak ``text``.

        Returns the scheduled utterance, or ``None`` when nothing will be
        spoken, in which case ``on_complete`` has already run.
        """
        self.cancel()

        normalized = " ".join(text.split())[: self._config.max_chars]
        if not normalized or not self._config.enabled or not self._engine.supported:
            self._logger.debug(
                "utterance_skipped",
                extra={"empty": not normalized, "enabled": self._config.enabled, "supported": self._engine.supported},
            )
            if advance_status:
                self._settle_idle()
            self._run_completion(on_complete)
            return None

        utterance = Utterance(text=normalized, on_complete=on_complete, advance_status=advance_status)
        self._current = utterance
        self._schedule(utterance, self._config.speak_delay_seconds)
        self._logger.info("utterance_scheduled", extra={"utterance_id": utterance.token.id, "chars": len(normalized)})
        return utterance

    def cancel(self) -> None:
        """Drop the current utterance; its callbacks are ignored from now on."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

        utterance, self._current = self._current, None
        if utterance is None:
            return

        utterance.token.cancel()
        self._logger.info("utterance_cancelled", extra={"utterance_id": utterance.token.id})
        try:
            self._engine.cancel_all()
        except Exception:  # noqa: BLE001 - a failing cancel must not block the next utterance.
            self._logger.exception("synthesis_cancel_failed")

    def _schedule(self, utterance: Utterance, delay: float) -> None:
        loop = asyncio.get_running_loop()
        if delay > 0:
            self._pending = loop.call_later(delay, self._start, utterance)
        else:
            self._pending = loop.call_soon(self._start, utterance)

    def _start(self, utterance: Utterance) -> None:
        self._pending = None
        if self._current is not utterance or not utterance.token.live:
            return

        utterance.attempts += 1
        attempt = utterance.attempts
        try:
            self._engine.speak(utterance.text, _UtteranceCallbacks(self, utterance, attempt))
        except Exception as exc:  # noqa: BLE001 - engine failures resolve like error callbacks.
            self._logger.exception("synthesis_start_failed", extra={"utterance_id": utterance.token.id})
            self._handle_error(utterance, attempt, type(exc).__name__)

    def _is_active(self, utterance: Utterance, attempt: int) -> bool:
        return self._current is utterance and utterance.token.live and attempt == utterance.attempts

    def _handle_start(self, utterance: Utterance, attempt: int) -> None:
        if not self._is_active(utterance, attempt):
            return
        self._logger.debug("utterance_started", extra={"utterance_id": utterance.token.id})
        if utterance.advance_status:
            self._status.try_transition(VoiceStatus.SPEAKING)

    def _handle_end(self, utterance: Utterance, attempt: int) -> None:
        if not self._is_active(utterance, attempt):
            return
        self._logger.info("utterance_finished", extra={"utterance_id": utterance.token.id})
        self._finish(utterance)

    def _handle_error(self, utterance: Utterance, attempt: int, kind: str) -> None:
        if not self._is_active(utterance, attempt):
            self._logger.debug("stale_synthesis_error_ignored", extra={"kind": kind})
            return

        if utterance.attempts <= self._config.max_retries:
            self._logger.info(
                "utterance_retry",
                extra={"utterance_id": utterance.token.id, "kind": kind, "attempt": utterance.attempts},
            )
            self._schedule(utterance, self._config.retry_delay_seconds)
            return

        self._logger.warning(
            "utterance_failed",
            extra={"utterance_id": utterance.token.id, "kind": kind, "attempts": utterance.attempts},
        )
        self._finish(utterance)

    def _finish(self, utterance: Utterance) -> None:
        utterance.token.resolve()
        self._current = None
        if utterance.advance_status:
            self._settle_idle()
        self._run_completion(utterance.on_complete)

    def _settle_idle(self) -> None:
        if self._status.current in (VoiceStatus.SPEAKING, VoiceStatus.PROCESSING):
            self._status.try_transition(VoiceStatus.IDLE)

    def _run_completion(self, on_complete: Callable[[], None] | None) -> None:
        if on_complete is None:
            return
        try:
            on_complete()
        except Exception:  # noqa: BLE001 - completion hooks belong to the host UI.
            self._logger.exception("utterance_completion_failed")
