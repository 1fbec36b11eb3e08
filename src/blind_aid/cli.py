"""Console stand-ins for the host UI and speech engines used by the CLI."""

from __future__ import annotations

import asyncio
from collections import deque

from rich.console import Console

from blind_aid.models import Screen, Severity
from blind_aid.voice.interfaces import RecognitionCallbacks, SynthesisCallbacks


class ScriptedRecognitionEngine:
    """Recognizer that "hears" queued transcripts instead of a microphone."""

    supported = True

    def __init__(self, transcripts: list[str] | None = None) -> None:
        self._transcripts: deque[str] = deque(transcripts or [])
        self._handles: list[asyncio.Handle] = []
        self._callbacks: RecognitionCallbacks | None = None

    def queue(self, transcript: str) -> None:
        self._transcripts.append(transcript)

    def start(self, callbacks: RecognitionCallbacks) -> None:
        loop = asyncio.get_running_loop()
        self._callbacks = callbacks
        self._handles = [loop.call_soon(callbacks.on_start)]
        if self._transcripts:
            self._handles.append(loop.call_soon(callbacks.on_result, self._transcripts.popleft()))
        else:
            self._handles.append(loop.call_soon(callbacks.on_error, "no-speech"))
        self._handles.append(loop.call_soon(callbacks.on_end))

    def stop(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []
        if self._callbacks is not None:
            self._callbacks.on_error("aborted")
            self._callbacks.on_end()
            self._callbacks = None


class ConsoleSynthesisEngine:
    """Prints utterances; each one "lasts" a fixed number of seconds."""

    supported = True

    def __init__(self, console: Console | None = None, *, seconds_per_utterance: float = 0.0) -> None:
        self._console = console or Console()
        self._seconds = seconds_per_utterance
        self._handles: list[asyncio.Handle] = []

    def speak(self, text: str, callbacks: SynthesisCallbacks) -> None:
        loop = asyncio.get_running_loop()
        self._console.print(f"[bold cyan]assistant:[/] {text}")
        self._handles = [
            loop.call_soon(callbacks.on_start),
            loop.call_later(self._seconds, callbacks.on_end),
        ]

    def cancel_all(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []


class ConsoleNotifier:
    """Renders notifications as console lines."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        style = "bold red" if severity == Severity.DESTRUCTIVE else "bold yellow"
        self._console.print(f"[{style}]{title}:[/] {description}")


class ConsoleNavigator:
    """Tracks the current screen and announces changes."""

    def __init__(self, console: Console | None = None, initial: Screen = Screen.DASHBOARD) -> None:
        self._console = console or Console()
        self.current = initial

    def __call__(self, screen: Screen) -> None:
        self.current = screen
        self._console.print(f"[bold green]screen:[/] {screen.display_name}")
