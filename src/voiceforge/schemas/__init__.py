"""Pydantic schemas and queue data types."""

from .app_settings import AppSettings, StreamerbotActions
from .moderation import (
    BlockedTopics,
    EffectiveGenerativeConfig,
    GenerativeOverride,
    GenerativeProcessingConfig,
    InstructionsOverride,
    ModerationConfig,
    ModerationOverride,
    ModerationRule,
    ProfanityOverride,
    ProfanityRule,
    TopicsOverride,
)
from .queue import (
    ActionResult,
    HistoryEntry,
    ItemSource,
    ItemStatus,
    QueueItem,
    QueueSnapshot,
    UsageMetrics,
)
from .voices import (
    LengthLimit,
    MaxLengthConfig,
    ReplacementRule,
    SanitizationConfig,
    VoiceConfig,
)

__all__ = [
    "ActionResult",
    "AppSettings",
    "BlockedTopics",
    "EffectiveGenerativeConfig",
    "GenerativeOverride",
    "GenerativeProcessingConfig",
    "HistoryEntry",
    "InstructionsOverride",
    "ItemSource",
    "ItemStatus",
    "LengthLimit",
    "MaxLengthConfig",
    "ModerationConfig",
    "ModerationOverride",
    "ModerationRule",
    "ProfanityOverride",
    "ProfanityRule",
    "QueueItem",
    "QueueSnapshot",
    "ReplacementRule",
    "SanitizationConfig",
    "StreamerbotActions",
    "TopicsOverride",
    "UsageMetrics",
    "VoiceConfig",
]
