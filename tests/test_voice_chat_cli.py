from __future__ import annotations

import sys
import types

import pytest


def test_voice_chat_reports_actionable_error_when_voice_backends_missing(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from blind_aid.main import app

    fake_stt = types.ModuleType("blind_aid.voice.stt_speechrecognition")
    fake_tts = types.ModuleType("blind_aid.voice.tts_pyttsx3")

    class _MissingBackend:
        supported = False

        def __init__(self, *args, **kwargs) -> None:
            pass

    fake_stt.SpeechRecognitionEngine = _MissingBackend
    fake_tts.Pyttsx3SynthesisEngine = _MissingBackend

    monkeypatch.setitem(sys.modules, "blind_aid.voice.stt_speechrecognition", fake_stt)
    monkeypatch.setitem(sys.modules, "blind_aid.voice.tts_pyttsx3", fake_tts)

    result = typer_testing.CliRunner().invoke(app, ["voice-chat"], catch_exceptions=False)

    assert result.exit_code == 1
    assert "pip install 'blind-aid[voice]'" in result.stdout
