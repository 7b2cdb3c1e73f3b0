"""Queue item, history entry and wire message schemas."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    PLAYING = "playing"
    PENDING_MODERATION = "pending_moderation"
    BLOCKED = "blocked"
    ERROR = "error"
    LINGERING = "lingering"
    CANCELLED = "cancelled"


class ItemSource(str, Enum):
    REQUEST = "request"
    REPLAY = "replay"
    MODERATED = "moderated"


class UsageMetrics(BaseModel):
    """Aggregated timing and token usage of the generative stage."""

    total_ms: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    parallel_tasks: int = 0


@dataclass
class QueueItem:
    """A single TTS request as it moves through the scheduler.

    Only the scheduler mutates items; pipeline stages return results that the
    scheduler copies onto the item.
    """

    text: str
    alias: Optional[str] = None
    username: Optional[str] = None
    redemption_id: Optional[str] = None
    reward_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: ItemStatus = ItemStatus.QUEUED
    source: ItemSource = ItemSource.REQUEST
    use_show_hide: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Stage snapshots
    after_sanitization: Optional[str] = None
    after_replacements: Optional[str] = None
    after_truncation: Optional[str] = None
    after_moderation: Optional[str] = None
    processed_text: Optional[str] = None
    pre_moderation_text: Optional[str] = None

    sanitization_applied: list[str] = field(default_factory=list)
    was_truncated: bool = False
    truncated_by: Optional[str] = None

    moderation_used: bool = False
    tags_added: list[str] = field(default_factory=list)
    moderation_usage: Optional[UsageMetrics] = None
    moderation_model: Optional[str] = None
    moderation_error: Optional[str] = None
    content_rewritten: bool = False
    block_reason: Optional[str] = None
    moderation_override: bool = False

    characters_used: int = 0
    audio: Optional[bytes] = None
    history_item_id: Optional[str] = None
    refunded: bool = False
    error: Optional[str] = None

    @property
    def display_text(self) -> str:
        return self.processed_text or self.text

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "alias": self.alias,
            "status": self.status.value,
            "error": self.error,
            "username": self.username,
            "blockReason": self.block_reason,
            "source": self.source.value,
        }


HistoryStatus = Literal["completed", "error", "blocked", "cancelled"]


class HistoryEntry(BaseModel):
    """Immutable record of an item's final disposition."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    text: str
    original_text: str
    after_sanitization: Optional[str] = None
    after_replacements: Optional[str] = None
    after_truncation: Optional[str] = None
    after_moderation: Optional[str] = None
    final_text: str
    moderation_override: bool = False
    was_truncated: bool = False
    truncated_by: Optional[str] = None
    sanitization_applied: list[str] = Field(default_factory=list)
    moderation_used: bool = False
    tags_added: list[str] = Field(default_factory=list)
    usage: Optional[UsageMetrics] = None
    moderation_model: Optional[str] = None
    moderation_error: Optional[str] = None
    block_reason: Optional[str] = None
    characters_used: int = 0
    voice_alias: str = "unknown"
    voice_id: Optional[str] = None
    model_id: Optional[str] = None
    duration_ms: Optional[int] = None
    status: HistoryStatus
    error: Optional[str] = None
    username: Optional[str] = None
    redemption_id: Optional[str] = None
    reward_id: Optional[str] = None
    refunded: bool = False
    history_item_id: Optional[str] = None


class TTSRequestMessage(BaseModel):
    """Inbound enqueue message from the chat bot."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["TTS"]
    text: str = Field(min_length=1)
    alias: Optional[str] = None
    username: Optional[str] = None
    redemption_id: Optional[str] = Field(default=None, alias="redemptionId")
    reward_id: Optional[str] = Field(default=None, alias="rewardId")


class TTSQueuedMessage(BaseModel):
    type: Literal["TTS_QUEUED"] = "TTS_QUEUED"
    id: str
    position: int
    status: Literal["queued"] = "queued"


class ErrorMessage(BaseModel):
    type: Literal["ERROR"] = "ERROR"
    message: str


class ActionResult(BaseModel):
    """Structured outcome of an operator action on the queue or history."""

    success: bool
    error: Optional[str] = None
    refunded: Optional[bool] = None
    item_id: Optional[str] = None


class QueueSnapshot(BaseModel):
    items: list[dict[str, Any]]
    is_processing: bool
    is_paused: bool
    current_id: Optional[str] = None
    is_lingering: bool = False


__all__ = [
    "ActionResult",
    "ErrorMessage",
    "HistoryEntry",
    "HistoryStatus",
    "ItemSource",
    "ItemStatus",
    "QueueItem",
    "QueueSnapshot",
    "TTSQueuedMessage",
    "TTSRequestMessage",
    "UsageMetrics",
]
