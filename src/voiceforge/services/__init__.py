"""External collaborators and persistence services."""

from .events import EventHub, EventPublisher
from .history import HistoryLog, build_history_entry
from .settings_store import SettingsStore
from .streamerbot import OverlayActuator, RefundActuator, StreamerbotActuator
from .synthesis import ElevenLabsSynthesizer, SynthesisResult, Synthesizer

__all__ = [
    "ElevenLabsSynthesizer",
    "EventHub",
    "EventPublisher",
    "HistoryLog",
    "OverlayActuator",
    "RefundActuator",
    "SettingsStore",
    "StreamerbotActuator",
    "SynthesisResult",
    "Synthesizer",
    "build_history_entry",
]
