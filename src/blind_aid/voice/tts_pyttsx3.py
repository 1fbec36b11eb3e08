"""Text-to-speech backend powered by ``pyttsx3``."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

from .interfaces import SynthesisCallbacks, SynthesisEngine

_INSTALL_HINT = "pip install 'blind-aid[voice]'"


class Pyttsx3SynthesisEngine(SynthesisEngine):
    """Speaker playback using a local pyttsx3 engine instance.

    ``runAndWait`` blocks, so playback runs on a single dedicated worker
    thread; ``cancel_all`` interrupts it with ``engine.stop()``.
    """

    def __init__(
        self,
        *,
        voice_id: str | None = None,
        rate: int | None = None,
        volume: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("blind_aid.voice.tts")
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pyttsx3")
        self._task: asyncio.Task[None] | None = None
        self.supported = False

        try:
            import pyttsx3
        except ImportError:
            self._logger.warning("pyttsx3_missing", extra={"hint": _INSTALL_HINT})
            return

        try:
            self._engine = pyttsx3.init()
        except Exception:  # noqa: BLE001 - no usable speech driver on this host.
            self._logger.exception("pyttsx3_init_failed")
            return

        if voice_id:
            self._engine.setProperty("voice", voice_id)
        if rate is not None:
            self._engine.setProperty("rate", rate)
        if volume is not None:
            self._engine.setProperty("volume", max(0.0, min(1.0, volume)))
        self.supported = True

    def speak(self, text: str, callbacks: SynthesisCallbacks) -> None:
        self._task = asyncio.get_running_loop().create_task(
            self._say(text, callbacks),
            name="pyttsx3-utterance",
        )

    def cancel_all(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self._engine.stop()

    async def _say(self, text: str, callbacks: SynthesisCallbacks) -> None:
        loop = asyncio.get_running_loop()
        callbacks.on_start()
        try:
            await loop.run_in_executor(self._executor, self._say_blocking, text)
        except asyncio.CancelledError:
            callbacks.on_error("interrupted")
            raise
        except Exception as exc:  # noqa: BLE001 - driver errors are reported through callbacks.
            callbacks.on_error(type(exc).__name__)
        else:
            callbacks.on_end()

    def _say_blocking(self, text: str) -> None:
        self._engine.say(text)
        self._engine.runAndWait()
