"""CLI startup entrypoint for BLIND AID."""

from __future__ import annotations

import asyncio

import typer
from rich import print

from blind_aid.adapters import EchoAnswerService, HttpAnswerService
from blind_aid.cli import ConsoleNavigator, ConsoleNotifier, ConsoleSynthesisEngine, ScriptedRecognitionEngine
from blind_aid.config import settings
from blind_aid.telemetry import configure_logging
from blind_aid.voice import VoiceController, VoiceOutputConfig, VoiceStatus
from blind_aid.voice.interfaces import AnswerService, Notifier, RecognitionEngine, SynthesisEngine

app = typer.Typer(help="BLIND AID voice assistant entrypoint")


@app.callback()
def _configure() -> None:
    configure_logging(settings.log_level)


def _build_answer_service() -> AnswerService:
    if settings.answer_endpoint:
        return HttpAnswerService(settings.answer_endpoint)
    return EchoAnswerService()


def _build_controller(
    recognition_engine: RecognitionEngine,
    synthesis_engine: SynthesisEngine,
    notifier: Notifier,
    answer_service: AnswerService,
) -> VoiceController:
    return VoiceController(
        recognition_engine=recognition_engine,
        synthesis_engine=synthesis_engine,
        answer_service=answer_service,
        notifier=notifier,
        output_config=VoiceOutputConfig(
            enabled=settings.voice_enabled,
            max_chars=settings.max_speech_chars,
            speak_delay_seconds=settings.speak_delay_seconds,
            retry_delay_seconds=settings.speak_retry_delay_seconds,
            max_retries=settings.max_speak_retries,
        ),
        recognition_timeout_seconds=settings.recognition_timeout_seconds,
        answer_timeout_seconds=settings.answer_timeout_seconds,
    )


async def _close_answer_service(answer_service: AnswerService) -> None:
    if isinstance(answer_service, HttpAnswerService):
        await answer_service.aclose()


async def _wait_until_idle(controller: VoiceController, timeout: float | None) -> None:
    async def _poll() -> None:
        while (
            controller.status != VoiceStatus.IDLE
            or controller.player.speaking
            or controller.dispatcher.pending is not None
        ):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


@app.command()
def start() -> None:
    """Show runtime voice configuration."""
    print(
        {
            "app_name": settings.app_name,
            "voice_enabled": settings.voice_enabled,
            "language": settings.language,
            "answer_endpoint": settings.answer_endpoint,
            "answer_timeout_seconds": settings.answer_timeout_seconds,
            "recognition_timeout_seconds": settings.recognition_timeout_seconds,
        }
    )


@app.command()
def simulate(
    transcript: str = typer.Argument(..., help="What the user says, e.g. 'please scan the room'"),
    timeout: float = typer.Option(30.0, help="Seconds to wait for the interaction to finish"),
) -> None:
    """Run one spoken interaction through the controller using typed text."""

    async def _run() -> dict:
        navigator = ConsoleNavigator()
        answer_service = _build_answer_service()
        controller = _build_controller(
            ScriptedRecognitionEngine([transcript]),
            ConsoleSynthesisEngine(),
            ConsoleNotifier(),
            answer_service,
        )
        controller.set_navigate(navigator)
        controller.start_listening()
        try:
            await _wait_until_idle(controller, timeout)
        finally:
            await controller.shutdown()
            await _close_answer_service(answer_service)
        return {"heard": controller.transcript, "screen": navigator.current.value, "status": controller.status.value}

    print(asyncio.run(_run()))


@app.command("voice-chat")
def voice_chat(
    phrase_time_limit: float = typer.Option(None, help="Per-utterance capture limit in seconds"),
) -> None:
    """Run an interactive push-to-talk loop with local STT/TTS backends."""
    from blind_aid.voice.stt_speechrecognition import SpeechRecognitionEngine
    from blind_aid.voice.tts_pyttsx3 import Pyttsx3SynthesisEngine

    recognizer = SpeechRecognitionEngine(
        language=settings.language,
        phrase_time_limit=phrase_time_limit or settings.phrase_time_limit_seconds,
    )
    synthesizer = Pyttsx3SynthesisEngine(
        voice_id=settings.tts_voice_id,
        rate=settings.tts_rate,
        volume=settings.tts_volume,
    )
    if not recognizer.supported or not synthesizer.supported:
        print({"error": "Voice backends are unavailable.", "hint": "pip install 'blind-aid[voice]'"})
        raise typer.Exit(code=1)

    async def _run() -> None:
        navigator = ConsoleNavigator()
        answer_service = _build_answer_service()
        controller = _build_controller(recognizer, synthesizer, ConsoleNotifier(), answer_service)
        controller.set_navigate(navigator)
        print({"voice_chat": "started", "hint": "Press Enter to speak; Ctrl+D to quit."})
        try:
            while True:
                try:
                    await asyncio.to_thread(input, "Press Enter to speak ... ")
                except EOFError:
                    break
                if not controller.start_listening():
                    continue
                await _wait_until_idle(controller, timeout=None)
                print({"heard": controller.transcript, "screen": navigator.current.value})
        finally:
            await controller.shutdown()
            await _close_answer_service(answer_service)
        print({"voice_chat": "stopped"})

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print({"voice_chat": "interrupted"})


if __name__ == "__main__":
    app()
