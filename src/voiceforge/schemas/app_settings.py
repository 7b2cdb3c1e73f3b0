"""Operator-editable application settings document."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..errors import VoiceNotFoundError
from .moderation import GenerativeProcessingConfig
from .voices import MaxLengthConfig, ReplacementRule, SanitizationConfig, VoiceConfig


class StreamerbotActions(BaseModel):
    """Streamer.bot action ids used for overlay show/hide and refunds."""

    show_action_id: str = ""
    hide_action_id: str = ""
    refund_action_id: str = ""


class AppSettings(BaseModel):
    voices: list[VoiceConfig] = Field(default_factory=list)
    default_voice_alias: str = ""
    global_volume: int = Field(default=100, ge=0, le=200)
    manual_moderation_enabled: bool = Field(
        default=False,
        description="When True, blocked items stay in the queue for operator review.",
    )
    minimum_linger_ms: int = Field(default=1500, ge=0)
    animation_duration_ms: int = Field(default=1200, ge=0)

    global_replacements: list[ReplacementRule] = Field(default_factory=list)
    max_message_length: MaxLengthConfig = Field(default_factory=MaxLengthConfig)
    sanitization: SanitizationConfig = Field(default_factory=SanitizationConfig)
    generative: GenerativeProcessingConfig = Field(
        default_factory=GenerativeProcessingConfig
    )

    history_file_logging_enabled: bool = True
    history_in_app_limit: int = Field(default=100, ge=1)

    streamerbot: StreamerbotActions = Field(default_factory=StreamerbotActions)

    def find_voice(self, alias: Optional[str]) -> Optional[VoiceConfig]:
        if not alias:
            return None
        return next((voice for voice in self.voices if voice.alias == alias), None)

    def resolve_voice(self, alias: Optional[str]) -> VoiceConfig:
        """Return the voice for ``alias``, else the default voice, else the first one."""

        voice = self.find_voice(alias) or self.find_voice(self.default_voice_alias)
        if voice is None and self.voices:
            voice = self.voices[0]
        if voice is None:
            raise VoiceNotFoundError(alias)
        return voice

    def effective_volume(self, voice: Optional[VoiceConfig]) -> int:
        if voice is not None and voice.volume is not None:
            return voice.volume
        return self.global_volume


__all__ = ["AppSettings", "StreamerbotActions"]
