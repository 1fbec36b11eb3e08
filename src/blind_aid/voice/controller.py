"""Host-facing voice controller wiring the recognition, output and dispatch pieces."""

from __future__ import annotations

import logging
from typing import Callable

from blind_aid.telemetry import LoggingNotifier

from .command_handler import CommandDispatcher
from .intents import CommandInterpreter
from .interfaces import AnswerService, Navigator, Notifier, RecognitionEngine, SynthesisEngine
from .output import UtterancePlayer, VoiceOutputConfig
from .recognition import RecognitionSessionManager
from .status import StatusListener, StatusMachine, VoiceStatus

_AFFORDANCE_LABELS: dict[VoiceStatus, str] = {
    VoiceStatus.IDLE: "Tap to Speak",
    VoiceStatus.LISTENING: "Listening...",
    VoiceStatus.PROCESSING: "Processing...",
    VoiceStatus.SPEAKING: "Speaking...",
}
UNSUPPORTED_LABEL = "Voice not supported"


class VoiceController:
    """Everything the host UI needs from the voice core.

    The components are created once here and live as long as the controller.
    The host renders :attr:`status` and :meth:`affordance`, calls
    :meth:`start_listening` when the user taps, and registers its navigation
    callback once via :meth:`set_navigate`.
    """

    def __init__(
        self,
        *,
        recognition_engine: RecognitionEngine,
        synthesis_engine: SynthesisEngine,
        answer_service: AnswerService,
        notifier: Notifier | None = None,
        output_config: VoiceOutputConfig | None = None,
        recognition_timeout_seconds: float | None = None,
        answer_timeout_seconds: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("blind_aid.voice.controller")
        notifier = notifier or LoggingNotifier()

        self.status_machine = StatusMachine()
        self.interpreter = CommandInterpreter()
        self.player = UtterancePlayer(synthesis_engine, self.status_machine, config=output_config)
        self.dispatcher = CommandDispatcher(
            player=self.player,
            status=self.status_machine,
            answer_service=answer_service,
            notifier=notifier,
            answer_timeout_seconds=answer_timeout_seconds,
        )
        self.recognition = RecognitionSessionManager(
            recognition_engine,
            self.status_machine,
            self.player,
            notifier,
            on_transcript=self._handle_transcript,
            timeout_seconds=recognition_timeout_seconds,
        )

    @property
    def status(self) -> VoiceStatus:
        return self.status_machine.current

    @property
    def transcript(self) -> str:
        return self.recognition.transcript

    @property
    def is_supported(self) -> bool:
        return self.recognition.is_supported

    def start_listening(self) -> bool:
        return self.recognition.start()

    def stop_listening(self) -> bool:
        return self.recognition.stop()

    def speak(self, text: str, on_complete: Callable[[], None] | None = None) -> None:
        """Speak on behalf of a screen, still obeying single-utterance pre-emption."""
        if self.status == VoiceStatus.LISTENING:
            self.recognition.abort()
        # An in-flight AI query owns ``processing``; screen speech must not end it.
        advance_status = self.dispatcher.pending is None
        self.player.speak(text, on_complete, advance_status=advance_status)

    def set_navigate(self, navigator: Navigator) -> None:
        self.dispatcher.set_navigator(navigator)

    def add_cancel_handler(self, handler: Callable[[], None]) -> Callable[[], None]:
        return self.dispatcher.add_cancel_handler(handler)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        return self.status_machine.subscribe(listener)

    def affordance(self) -> str:
        """Label for the voice button in its current state."""
        if not self.is_supported:
            return UNSUPPORTED_LABEL
        if self.transcript:
            return f'"{self.transcript}"'
        return _AFFORDANCE_LABELS[self.status]

    async def shutdown(self) -> None:
        """Cancel whatever is in flight and return to idle."""
        await self.dispatcher.cancel_pending()
        self.recognition.abort()
        self.player.cancel()
        self.status_machine.reset()
        self._logger.info("voice_controller_shutdown")

    def _handle_transcript(self, transcript: str) -> None:
        action = self.interpreter.interpret(transcript)
        self.dispatcher.dispatch(action)
