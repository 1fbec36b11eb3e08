from __future__ import annotations

import asyncio

from blind_aid.models import Severity


class FakeRecognitionEngine:
    def __init__(self, *, supported: bool = True, fail_on_start: bool = False) -> None:
        self.supported = supported
        self.fail_on_start = fail_on_start
        self.sessions: list = []
        self.stop_calls = 0

    @property
    def session(self):
        return self.sessions[-1]

    def start(self, callbacks) -> None:
        if self.fail_on_start:
            raise RuntimeError("microphone busy")
        self.sessions.append(callbacks)

    def stop(self) -> None:
        self.stop_calls += 1


class FakeSynthesisEngine:
    def __init__(self, *, supported: bool = True, auto_finish: bool = False) -> None:
        self.supported = supported
        self.auto_finish = auto_finish
        self.spoken: list[str] = []
        self.callbacks: list = []
        self.cancel_calls = 0

    @property
    def current(self):
        return self.callbacks[-1]

    def speak(self, text: str, callbacks) -> None:
        self.spoken.append(text)
        self.callbacks.append(callbacks)
        if self.auto_finish:
            loop = asyncio.get_running_loop()
            loop.call_soon(callbacks.on_start)
            loop.call_soon(callbacks.on_end)

    def cancel_all(self) -> None:
        self.cancel_calls += 1


class StubNotifier:
    def __init__(self) -> None:
        self.notifications: list[tuple[str, str, Severity]] = []

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        self.notifications.append((title, description, severity))


class StubAnswerService:
    def __init__(self, response: str = "It is noon.", *, error: Exception | None = None, delay: float = 0.0) -> None:
        self.response = response
        self.error = error
        self.delay = delay
        self.queries: list[str] = []

    async def answer(self, query: str) -> str:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response
