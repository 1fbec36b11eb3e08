from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Screen(str, Enum):
    """Application screens the host UI can navigate to."""

    DASHBOARD = "dashboard"
    OBJECT_DETECTION = "object-detection"
    EMERGENCY = "emergency"
    SETTINGS = "settings"

    @property
    def display_name(self) -> str:
        return _SCREEN_NAMES[self]


_SCREEN_NAMES: dict[Screen, str] = {
    Screen.DASHBOARD: "BLIND AID",
    Screen.OBJECT_DETECTION: "Object Detection",
    Screen.EMERGENCY: "Emergency SOS",
    Screen.SETTINGS: "Settings",
}


class Severity(str, Enum):
    """Notification severity understood by the host UI."""

    INFO = "info"
    DESTRUCTIVE = "destructive"


class VoiceActionType(str, Enum):
    NAVIGATE = "navigate"
    CANCEL_SOS = "cancel_sos"
    ANSWER_QUERY = "answer_query"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class VoiceAction:
    """Classified intent derived from one transcript."""

    type: VoiceActionType
    screen: Screen | None = None
    text: str = ""
