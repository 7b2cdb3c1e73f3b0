"""Voice profile schemas and the text-pipeline configuration they carry."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .moderation import GenerativeOverride


class ReplacementRule(BaseModel):
    """A single pattern substitution rule."""

    id: Optional[str] = None
    pattern: str = ""
    replacement: str = ""
    is_regex: bool = False
    case_sensitive: bool = False
    enabled: bool = True


class SanitizationConfig(BaseModel):
    """Toggles for the individual sanitizer steps.

    Spam collapsing is not listed because it always runs.
    """

    strip_html_tags: bool = True
    strip_code_blocks: bool = True
    strip_zalgo_text: bool = True
    replace_emojis: bool = True
    strip_user_bracket_tags: bool = True

    @classmethod
    def disabled(cls) -> "SanitizationConfig":
        return cls(
            strip_html_tags=False,
            strip_code_blocks=False,
            strip_zalgo_text=False,
            replace_emojis=False,
            strip_user_bracket_tags=False,
        )


class LengthLimit(BaseModel):
    enabled: bool = False
    value: int = Field(default=500, ge=1)


class MaxLengthConfig(BaseModel):
    """Dual character/word caps. Both may be enabled at once."""

    characters: LengthLimit = Field(default_factory=lambda: LengthLimit(value=500))
    words: LengthLimit = Field(default_factory=lambda: LengthLimit(value=50))


class VoiceConfig(BaseModel):
    """Per-speaker profile: synthesis identity plus pipeline overrides."""

    alias: str
    elevenlabs_voice_id: str = ""
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.75, ge=0.0, le=1.0)
    style: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    speed: Optional[float] = Field(default=None, gt=0.0)
    use_speaker_boost: bool = True
    volume: Optional[int] = Field(default=None, ge=0, le=200)

    # Sanitization overrides
    ignore_sanitization: bool = False
    allow_user_bracket_tags: bool = False
    allow_zalgo_text: bool = False
    allow_emojis: bool = False

    # Replacement rules
    ignore_global_replacements: bool = False
    replacements: list[ReplacementRule] = Field(default_factory=list)

    # Length limits
    ignore_max_message_length: bool = False
    max_message_length_override: Optional[MaxLengthConfig] = None

    # Moderation / voice direction
    ignore_generative_processing: bool = False
    generative_override: Optional[GenerativeOverride] = None
    model_override: Optional[str] = None

    def voice_settings(self) -> dict[str, float | bool]:
        """Return the synthesis provider's ``voice_settings`` payload."""

        settings: dict[str, float | bool] = {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "use_speaker_boost": self.use_speaker_boost,
        }
        # Style only applies to the multilingual v2 model and adds latency
        if (
            self.elevenlabs_model_id == "eleven_multilingual_v2"
            and self.style is not None
            and self.style > 0
        ):
            settings["style"] = self.style
        if self.speed is not None and self.speed != 1.0:
            settings["speed"] = self.speed
        return settings


__all__ = [
    "LengthLimit",
    "MaxLengthConfig",
    "ReplacementRule",
    "SanitizationConfig",
    "VoiceConfig",
]
