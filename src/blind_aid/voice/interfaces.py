"""Contracts for speech engines and the collaborators the voice core consumes."""

from __future__ import annotations

from typing import Callable, Protocol

from blind_aid.models import Screen, Severity

Navigator = Callable[[Screen], None]


class RecognitionCallbacks(Protocol):
    """Receives the events of one recognition session."""

    def on_start(self) -> None: ...

    def on_result(self, text: str) -> None: ...

    def on_error(self, kind: str) -> None: ...

    def on_end(self) -> None: ...


class RecognitionEngine(Protocol):
    """Single-shot speech-to-text engine."""

    supported: bool

    def start(self, callbacks: RecognitionCallbacks) -> None:
        """Open a session that reports to ``callbacks``."""

    def stop(self) -> None:
        """Request the live session to end; the engine reports back via callbacks."""


class SynthesisCallbacks(Protocol):
    """Receives the events of one spoken utterance."""

    def on_start(self) -> None: ...

    def on_end(self) -> None: ...

    def on_error(self, kind: str) -> None: ...


class SynthesisEngine(Protocol):
    """Text-to-speech engine with a global cancel operation."""

    supported: bool

    def speak(self, text: str, callbacks: SynthesisCallbacks) -> None:
        """Start speaking ``text``, reporting progress to ``callbacks``."""

    def cancel_all(self) -> None:
        """Stop whatever is playing or queued."""


class AnswerService(Protocol):
    """Answers a free-form question asked by the user."""

    async def answer(self, query: str) -> str:
        """Return the spoken answer for ``query``."""


class Notifier(Protocol):
    """Non-blocking, observational user notifications."""

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        """Show a notification to the user."""
