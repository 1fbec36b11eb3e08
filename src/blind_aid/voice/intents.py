"""Spoken-command classification."""

from __future__ import annotations

from blind_aid.models import Screen, VoiceAction, VoiceActionType

_NAVIGATION_RULES: tuple[tuple[tuple[str, ...], Screen], ...] = (
    (("detect", "look", "scan"), Screen.OBJECT_DETECTION),
    (("emergency", "help", "sos"), Screen.EMERGENCY),
    (("home", "dashboard"), Screen.DASHBOARD),
)
_CANCEL_PHRASES = ("cancel", "stop")


class CommandInterpreter:
    """Maps a transcript to a :class:`VoiceAction`.

    Matching is case-insensitive substring containment, so natural phrasing
    like "please scan the room" still navigates. The first matching rule wins.
    """

    def interpret(self, transcript: str) -> VoiceAction:
        text = transcript.strip()
        if not text:
            return VoiceAction(type=VoiceActionType.UNKNOWN, text="")

        lowered = " ".join(text.split()).lower()
        for phrases, screen in _NAVIGATION_RULES:
            if any(phrase in lowered for phrase in phrases):
                return VoiceAction(type=VoiceActionType.NAVIGATE, screen=screen, text=text)

        if any(phrase in lowered for phrase in _CANCEL_PHRASES):
            return VoiceAction(type=VoiceActionType.CANCEL_SOS, text=text)

        return VoiceAction(type=VoiceActionType.ANSWER_QUERY, text=text)
