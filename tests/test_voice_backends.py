from __future__ import annotations

import asyncio
import sys
import threading
import types

from blind_aid.models import Severity
from blind_aid.voice.output import UtterancePlayer, VoiceOutputConfig
from blind_aid.voice.recognition import RecognitionSessionManager
from blind_aid.voice.status import StatusMachine, VoiceStatus
from blind_aid.voice.stt_speechrecognition import SpeechRecognitionEngine
from blind_aid.voice.tts_pyttsx3 import Pyttsx3SynthesisEngine
from stubs import FakeSynthesisEngine, StubNotifier


class RecordingCallbacks:
    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def on_start(self) -> None:
        self.events.append(("start",))

    def on_result(self, text: str) -> None:
        self.events.append(("result", text))

    def on_error(self, kind: str) -> None:
        self.events.append(("error", kind))

    def on_end(self) -> None:
        self.events.append(("end",))


async def _until_ended(callbacks: RecordingCallbacks) -> None:
    async def _poll() -> None:
        while ("end",) not in callbacks.events:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=2)


def _install_speech_recognition(monkeypatch, *, listen=None, recognize=None) -> types.ModuleType:
    fake_sr = types.ModuleType("speech_recognition")

    class WaitTimeoutError(Exception):
        pass

    class UnknownValueError(Exception):
        pass

    class RequestError(Exception):
        pass

    class Microphone:
        def __init__(self) -> None:
            self._inside = False

        def __enter__(self):
            if self._inside:
                raise AssertionError("This audio source is already inside a context manager")
            self._inside = True
            return self

        def __exit__(self, *exc_info) -> bool:
            self._inside = False
            return False

    class Recognizer:
        def adjust_for_ambient_noise(self, source, duration: float = 1.0) -> None:
            pass

        def listen(self, source, timeout=None, phrase_time_limit=None):
            return listen() if listen is not None else b"audio"

        def recognize_google(self, audio, language: str = "en-US") -> str:
            return recognize() if recognize is not None else "scan the room"

    fake_sr.WaitTimeoutError = WaitTimeoutError
    fake_sr.UnknownValueError = UnknownValueError
    fake_sr.RequestError = RequestError
    fake_sr.Microphone = Microphone
    fake_sr.Recognizer = Recognizer
    monkeypatch.setitem(sys.modules, "speech_recognition", fake_sr)
    return fake_sr


def _run_session(engine: SpeechRecognitionEngine) -> list[tuple[str, ...]]:
    async def _run():
        callbacks = RecordingCallbacks()
        engine.start(callbacks)
        await _until_ended(callbacks)
        return callbacks.events

    return asyncio.run(_run())


def test_speech_recognition_missing_module_is_unsupported(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "speech_recognition", None)

    assert SpeechRecognitionEngine().supported is False


def test_speech_recognition_delivers_transcript(monkeypatch) -> None:
    _install_speech_recognition(monkeypatch)
    engine = SpeechRecognitionEngine(adjust_noise_seconds=0)

    assert engine.supported is True
    assert _run_session(engine) == [("start",), ("result", "scan the room"), ("end",)]


def test_speech_recognition_maps_silence_to_no_speech(monkeypatch) -> None:
    def _silent():
        raise fake_sr.WaitTimeoutError("listening timed out")

    fake_sr = _install_speech_recognition(monkeypatch, listen=_silent)

    assert _run_session(SpeechRecognitionEngine()) == [("start",), ("error", "no-speech"), ("end",)]


def test_speech_recognition_maps_unintelligible_audio_to_no_speech(monkeypatch) -> None:
    def _mumble():
        raise fake_sr.UnknownValueError()

    fake_sr = _install_speech_recognition(monkeypatch, recognize=_mumble)

    assert _run_session(SpeechRecognitionEngine()) == [("start",), ("error", "no-speech"), ("end",)]


def test_speech_recognition_maps_request_failure_to_network(monkeypatch) -> None:
    def _offline():
        raise fake_sr.RequestError("recognition connection failed")

    fake_sr = _install_speech_recognition(monkeypatch, recognize=_offline)

    assert _run_session(SpeechRecognitionEngine()) == [("start",), ("error", "network"), ("end",)]


def test_speech_recognition_reports_unexpected_failures_by_type(monkeypatch) -> None:
    def _broken():
        raise ValueError("bad audio frame")

    _install_speech_recognition(monkeypatch, recognize=_broken)

    assert _run_session(SpeechRecognitionEngine()) == [("start",), ("error", "ValueError"), ("end",)]


def test_speech_recognition_stop_reports_aborted(monkeypatch) -> None:
    release = threading.Event()
    _install_speech_recognition(monkeypatch, listen=lambda: release.wait(timeout=2) and b"audio")
    engine = SpeechRecognitionEngine()

    async def _run():
        callbacks = RecordingCallbacks()
        engine.start(callbacks)
        await asyncio.sleep(0.05)
        engine.stop()
        await _until_ended(callbacks)
        return callbacks.events

    try:
        events = asyncio.run(_run())
    finally:
        release.set()

    assert events == [("start",), ("error", "aborted"), ("end",)]


def test_restart_while_previous_capture_holds_microphone_is_surfaced(monkeypatch) -> None:
    release = threading.Event()
    _install_speech_recognition(monkeypatch, listen=lambda: release.wait(timeout=2) and b"audio")
    engine = SpeechRecognitionEngine()
    status = StatusMachine()
    notifier = StubNotifier()
    player = UtterancePlayer(FakeSynthesisEngine(), status, VoiceOutputConfig(speak_delay_seconds=0))
    manager = RecognitionSessionManager(engine, status, player, notifier, on_transcript=lambda text: None)

    async def _run():
        assert manager.start() is True
        await asyncio.sleep(0.05)
        assert manager.stop() is True
        await asyncio.sleep(0.05)
        assert status.current == VoiceStatus.IDLE
        assert notifier.notifications == []

        assert manager.start() is True
        await asyncio.sleep(0.05)

    try:
        asyncio.run(_run())
    finally:
        release.set()

    assert status.current == VoiceStatus.IDLE
    assert notifier.notifications == [
        ("Voice Error", "Could not understand. Error: audio-capture", Severity.DESTRUCTIVE)
    ]


class _FakeDriver:
    def __init__(self, blocking_texts: tuple[str, ...] = ()) -> None:
        self.properties: dict[str, object] = {}
        self.said: list[str] = []
        self.stop_calls = 0
        self._blocking_texts = blocking_texts
        self._stopped = threading.Event()

    def setProperty(self, name: str, value) -> None:
        self.properties[name] = value

    def say(self, text: str) -> None:
        self.said.append(text)

    def runAndWait(self) -> None:
        if self.said[-1] in self._blocking_texts:
            self._stopped.wait(timeout=2)

    def stop(self) -> None:
        self.stop_calls += 1
        self._stopped.set()


def _install_pyttsx3(monkeypatch, driver: _FakeDriver) -> None:
    fake_pyttsx3 = types.ModuleType("pyttsx3")
    fake_pyttsx3.init = lambda: driver
    monkeypatch.setitem(sys.modules, "pyttsx3", fake_pyttsx3)


def test_pyttsx3_applies_voice_properties(monkeypatch) -> None:
    driver = _FakeDriver()
    _install_pyttsx3(monkeypatch, driver)

    engine = Pyttsx3SynthesisEngine(voice_id="english", rate=160, volume=1.7)

    assert engine.supported is True
    assert driver.properties == {"voice": "english", "rate": 160, "volume": 1.0}


def test_pyttsx3_speaks_through_player(monkeypatch) -> None:
    driver = _FakeDriver()
    _install_pyttsx3(monkeypatch, driver)
    status = StatusMachine()
    player = UtterancePlayer(Pyttsx3SynthesisEngine(), status, VoiceOutputConfig(speak_delay_seconds=0))
    done: list[str] = []

    async def _run():
        player.speak("Returning to dashboard.", lambda: done.append("done"))
        await asyncio.wait_for(_until_idle(player), timeout=2)

    asyncio.run(_run())

    assert driver.said == ["Returning to dashboard."]
    assert done == ["done"]
    assert status.current == VoiceStatus.IDLE


def test_pyttsx3_interruption_of_superseded_utterance_is_ignored(monkeypatch) -> None:
    driver = _FakeDriver(blocking_texts=("first",))
    _install_pyttsx3(monkeypatch, driver)
    status = StatusMachine()
    player = UtterancePlayer(Pyttsx3SynthesisEngine(), status, VoiceOutputConfig(speak_delay_seconds=0))
    done: list[str] = []

    async def _run():
        player.speak("first", lambda: done.append("first"))
        await asyncio.sleep(0.05)
        assert status.current == VoiceStatus.SPEAKING

        player.speak("second", lambda: done.append("second"))
        await asyncio.wait_for(_until_idle(player), timeout=2)

    asyncio.run(_run())

    assert driver.stop_calls == 1
    assert driver.said == ["first", "second"]
    assert done == ["second"]
    assert status.current == VoiceStatus.IDLE


async def _until_idle(player: UtterancePlayer) -> None:
    while player.speaking:
        await asyncio.sleep(0.01)
