"""Voice input and output module boundaries."""

from .command_handler import CommandDispatcher
from .controller import VoiceController
from .intents import CommandInterpreter
from .interfaces import AnswerService, Navigator, Notifier, RecognitionEngine, SynthesisEngine
from .output import Utterance, UtterancePlayer, VoiceOutputConfig
from .recognition import RecognitionSessionManager
from .status import InvalidTransitionError, StatusMachine, VoiceStatus

__all__ = [
    "AnswerService",
    "CommandDispatcher",
    "CommandInterpreter",
    "InvalidTransitionError",
    "Navigator",
    "Notifier",
    "RecognitionEngine",
    "RecognitionSessionManager",
    "StatusMachine",
    "SynthesisEngine",
    "Utterance",
    "UtterancePlayer",
    "VoiceController",
    "VoiceOutputConfig",
    "VoiceStatus",
]
