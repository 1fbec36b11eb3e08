"""Speech-to-text backend powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor

from .interfaces import RecognitionCallbacks, RecognitionEngine

_INSTALL_HINT = "pip install 'blind-aid[voice]'"


class SpeechRecognitionEngine(RecognitionEngine):
    """Single-shot microphone recognition; one best transcript per session.

    Capture and recognition block, so they run in a worker thread while the
    session callbacks are delivered on the event loop.
    """

    def __init__(
        self,
        *,
        language: str = "en-US",
        phrase_time_limit: float = 5.0,
        timeout: float | None = 5.0,
        adjust_noise_seconds: float = 0.2,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("blind_aid.voice.stt")
        self._language = language
        self._phrase_time_limit = phrase_time_limit
        self._timeout = timeout
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._task: asyncio.Task[None] | None = None
        # Cancelling a session cannot interrupt a blocking capture, so the
        # worker may still hold the microphone when the next session starts.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="speech-capture")
        self._capture_future: Future | None = None
        self.supported = False

        try:
            import speech_recognition as sr
        except ImportError:
            self._logger.warning("speech_recognition_missing", extra={"hint": _INSTALL_HINT})
            return

        try:
            self._microphone = sr.Microphone()
        except (AttributeError, OSError):
            # AttributeError: PyAudio is not installed.
            self._logger.warning("microphone_unavailable", extra={"hint": _INSTALL_HINT})
            return

        self._sr = sr
        self._recognizer = sr.Recognizer()
        self.supported = True

    def start(self, callbacks: RecognitionCallbacks) -> None:
        if self._task is not None and not self._task.done():
            raise RuntimeError("A recognition session is already running")
        self._task = asyncio.get_running_loop().create_task(
            self._run(callbacks),
            name="speech-recognition-session",
        )

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self, callbacks: RecognitionCallbacks) -> None:
        callbacks.on_start()
        try:
            if self._capture_future is not None and not self._capture_future.done():
                self._logger.warning("microphone_busy")
                callbacks.on_error("audio-capture")
                return
            self._capture_future = self._executor.submit(self._capture)
            audio = await asyncio.wrap_future(self._capture_future)
            if audio is None:
                callbacks.on_error("no-speech")
                return
            text = await asyncio.to_thread(self._recognize, audio)
            if text:
                callbacks.on_result(text)
            else:
                callbacks.on_error("no-speech")
        except asyncio.CancelledError:
            callbacks.on_error("aborted")
            raise
        except self._sr.RequestError:
            callbacks.on_error("network")
        except OSError:
            callbacks.on_error("audio-capture")
        except Exception as exc:  # noqa: BLE001 - backend failures are reported through callbacks.
            self._logger.exception("speech_recognition_failed")
            callbacks.on_error(type(exc).__name__)
        finally:
            callbacks.on_end()

    def _capture(self):
        with self._microphone as source:
            if self._adjust_noise_seconds > 0:
                self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
            try:
                return self._recognizer.listen(
                    source,
                    timeout=self._timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
            except self._sr.WaitTimeoutError:
                return None

    def _recognize(self, audio) -> str:
        try:
            return self._recognizer.recognize_google(audio, language=self._language)
        except self._sr.UnknownValueError:
            return ""
