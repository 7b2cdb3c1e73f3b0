"""Moderation and generative processing configuration schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

Strictness = Literal["off", "standard", "strict"]
RuleCategory = Literal["safety", "copyright", "profanity"]
RiskTier = Literal["high", "medium", "low"]
FailurePolicy = Literal["block", "skip"]
ProfanityMode = Literal["block", "replace", "allow"]
ReasoningEffort = Literal["minimal", "low", "medium", "high"]


class ModerationRule(BaseModel):
    """Strictness setting for a single safety or copyright rule."""

    level: Strictness = "standard"


class ProfanityRule(BaseModel):
    """Profanity handling: block the message, replace words, or allow."""

    mode: ProfanityMode = "replace"
    level: Literal["standard", "strict"] = "standard"
    replacement_word: str = "quack"
    exceptions: list[str] = Field(default_factory=list)


def default_rules() -> dict[str, ModerationRule]:
    return {
        "sexual_content": ModerationRule(level="standard"),
        "hate_speech": ModerationRule(level="standard"),
        "violence": ModerationRule(level="standard"),
        "doxxing": ModerationRule(level="standard"),
        "misinformation": ModerationRule(level="standard"),
        "song_lyrics": ModerationRule(level="standard"),
        "media_quotes": ModerationRule(level="off"),
    }


class BlockedTopics(BaseModel):
    """Topic presets (True = blocked, False = explicitly allowed) plus custom topics."""

    presets: dict[str, bool] = Field(default_factory=dict)
    custom: list[str] = Field(default_factory=list)


class ModerationConfig(BaseModel):
    enabled: bool = True
    on_failure: FailurePolicy = "block"
    rules: dict[str, ModerationRule] = Field(default_factory=default_rules)
    profanity: ProfanityRule = Field(default_factory=ProfanityRule)
    blocked_topics: BlockedTopics = Field(default_factory=BlockedTopics)
    custom_instructions: str = ""


class GenerativeProcessingConfig(BaseModel):
    """Global settings for the moderation and voice-direction stage."""

    enabled: bool = False
    model: str = "openai/gpt-5-nano"
    reasoning_effort: ReasoningEffort = "minimal"
    content_moderation: ModerationConfig = Field(default_factory=ModerationConfig)
    emotion_enhancement: bool = True


class ProfanityOverride(ProfanityRule):
    override: bool = False


class TopicsOverride(BaseModel):
    mode: Literal["inherit", "additive", "override"] = "inherit"
    presets: dict[str, bool] = Field(default_factory=dict)
    custom: list[str] = Field(default_factory=list)


class InstructionsOverride(BaseModel):
    mode: Literal["inherit", "append", "override"] = "inherit"
    text: str = ""


class ModerationOverride(BaseModel):
    enabled: Optional[bool] = None
    on_failure: Optional[FailurePolicy] = None
    rules: dict[str, ModerationRule] = Field(default_factory=dict)
    profanity: Optional[ProfanityOverride] = None
    blocked_topics: Optional[TopicsOverride] = None
    custom_instructions: Optional[InstructionsOverride] = None


class GenerativeOverride(BaseModel):
    """Voice-level layer applied on top of the global generative config."""

    content_moderation: Optional[ModerationOverride] = None
    emotion_enhancement: Optional[bool] = None


class EffectiveGenerativeConfig(BaseModel):
    """Result of layering defaults, global settings and a voice override."""

    enabled: bool
    bypassed: bool = False
    model: Optional[str] = None
    reasoning_effort: ReasoningEffort = "minimal"
    content_moderation: ModerationConfig
    emotion_enhancement: bool = False


__all__ = [
    "BlockedTopics",
    "EffectiveGenerativeConfig",
    "FailurePolicy",
    "GenerativeOverride",
    "GenerativeProcessingConfig",
    "InstructionsOverride",
    "ModerationConfig",
    "ModerationOverride",
    "ModerationRule",
    "ProfanityOverride",
    "ProfanityRule",
    "ReasoningEffort",
    "RiskTier",
    "RuleCategory",
    "Strictness",
    "TopicsOverride",
    "default_rules",
]
