"""Resolve the effective generative/moderation config for one voice.

Layer order:

1. Hard voice bypass (``ignore_generative_processing``) or a missing API key
   short-circuits to a disabled config.
2. Built-in defaults (``default_rules()`` and friends).
3. Global settings. Rules are merged per key over the defaults; everything
   else replaces the default.
4. Voice override:

   - ``enabled``/``on_failure``/``emotion_enhancement``: replace when set.
   - ``rules``: merged per key.
   - ``profanity``: replaces the global rule only when ``override`` is true.
   - ``blocked_topics``: ``inherit`` keeps global, ``additive`` merges presets
     and appends custom topics, ``override`` replaces both.
   - ``custom_instructions``: ``inherit`` keeps global, ``append`` adds the
     voice text under a "Voice-specific rules" heading, ``override`` replaces.

5. Voice ``model_override`` replaces the model.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..schemas.moderation import (
    BlockedTopics,
    EffectiveGenerativeConfig,
    GenerativeProcessingConfig,
    InstructionsOverride,
    ModerationConfig,
    ModerationOverride,
    ProfanityRule,
    TopicsOverride,
    default_rules,
)
from ..schemas.voices import VoiceConfig

logger = logging.getLogger(__name__)


def _disabled(bypassed: bool) -> EffectiveGenerativeConfig:
    return EffectiveGenerativeConfig(
        enabled=False,
        bypassed=bypassed,
        model=None,
        content_moderation=ModerationConfig(enabled=False, on_failure="skip"),
        emotion_enhancement=False,
    )


def _merge_topics(base: BlockedTopics, override: Optional[TopicsOverride]) -> BlockedTopics:
    if override is None or override.mode == "inherit":
        return base
    if override.mode == "override":
        return BlockedTopics(presets=dict(override.presets), custom=list(override.custom))
    return BlockedTopics(
        presets={**base.presets, **override.presets},
        custom=[*base.custom, *override.custom],
    )


def _merge_instructions(base: str, override: Optional[InstructionsOverride]) -> str:
    if override is None or override.mode == "inherit":
        return base
    if override.mode == "override":
        return override.text
    if not override.text:
        return base
    if not base:
        return override.text
    return f"{base}\n\nVoice-specific rules:\n{override.text}"


def _apply_moderation_override(
    base: ModerationConfig, override: ModerationOverride, alias: str
) -> ModerationConfig:
    config = base.model_copy(deep=True)
    if override.enabled is not None:
        config.enabled = override.enabled
    if override.on_failure is not None:
        config.on_failure = override.on_failure
    if override.rules:
        config.rules = {**config.rules, **override.rules}
    if override.profanity is not None and override.profanity.override:
        config.profanity = ProfanityRule(
            mode=override.profanity.mode,
            level=override.profanity.level,
            replacement_word=override.profanity.replacement_word or "quack",
            exceptions=list(override.profanity.exceptions),
        )
        logger.debug(
            "Voice %s profanity override: mode=%s level=%s",
            alias,
            config.profanity.mode,
            config.profanity.level,
        )
    config.blocked_topics = _merge_topics(config.blocked_topics, override.blocked_topics)
    config.custom_instructions = _merge_instructions(
        config.custom_instructions, override.custom_instructions
    )
    return config


def resolve_generative_config(
    voice: Optional[VoiceConfig],
    global_config: Optional[GenerativeProcessingConfig],
    *,
    api_key_present: bool,
) -> EffectiveGenerativeConfig:
    if not api_key_present:
        return _disabled(bypassed=bool(voice and voice.ignore_generative_processing))
    if voice is not None and voice.ignore_generative_processing:
        logger.info("Voice %s bypasses generative processing", voice.alias)
        return _disabled(bypassed=True)

    global_config = global_config or GenerativeProcessingConfig()
    moderation = global_config.content_moderation.model_copy(deep=True)
    moderation.rules = {**default_rules(), **moderation.rules}

    emotion = global_config.emotion_enhancement
    model = global_config.model or GenerativeProcessingConfig().model

    if voice is not None and voice.generative_override is not None:
        override = voice.generative_override
        if override.content_moderation is not None:
            moderation = _apply_moderation_override(
                moderation, override.content_moderation, voice.alias
            )
        if override.emotion_enhancement is not None:
            emotion = override.emotion_enhancement

    if voice is not None and voice.model_override:
        model = voice.model_override

    return EffectiveGenerativeConfig(
        enabled=global_config.enabled,
        model=model,
        reasoning_effort=global_config.reasoning_effort,
        content_moderation=moderation,
        emotion_enhancement=emotion,
    )


__all__ = ["resolve_generative_config"]
