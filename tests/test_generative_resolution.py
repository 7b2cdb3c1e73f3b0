from voiceforge.moderation.resolution import resolve_generative_config
from voiceforge.schemas.moderation import (
    BlockedTopics,
    GenerativeOverride,
    GenerativeProcessingConfig,
    InstructionsOverride,
    ModerationConfig,
    ModerationOverride,
    ModerationRule,
    ProfanityOverride,
    TopicsOverride,
)
from voiceforge.schemas.voices import VoiceConfig


def global_config(**moderation) -> GenerativeProcessingConfig:
    return GenerativeProcessingConfig(
        enabled=True,
        model="openai/gpt-5-mini",
        content_moderation=ModerationConfig(**moderation),
    )


def voice_with(moderation: ModerationOverride | None = None, **kwargs) -> VoiceConfig:
    return VoiceConfig(
        alias="robot",
        generative_override=GenerativeOverride(content_moderation=moderation),
        **kwargs,
    )


def test_missing_api_key_disables_everything() -> None:
    config = resolve_generative_config(None, global_config(), api_key_present=False)

    assert config.enabled is False
    assert config.content_moderation.enabled is False


def test_voice_bypass_wins_over_everything() -> None:
    voice = VoiceConfig(alias="raw", ignore_generative_processing=True)

    config = resolve_generative_config(voice, global_config(), api_key_present=True)

    assert config.enabled is False
    assert config.bypassed is True


def test_global_rules_merge_over_defaults() -> None:
    config = resolve_generative_config(
        None,
        global_config(rules={"media_quotes": ModerationRule(level="strict")}),
        api_key_present=True,
    )

    rules = config.content_moderation.rules
    assert config.enabled is True
    assert config.model == "openai/gpt-5-mini"
    assert rules["media_quotes"].level == "strict"
    assert rules["hate_speech"].level == "standard"


def test_voice_rules_merge_per_key() -> None:
    voice = voice_with(ModerationOverride(rules={"violence": ModerationRule(level="off")}))

    config = resolve_generative_config(voice, global_config(), api_key_present=True)

    assert config.content_moderation.rules["violence"].level == "off"
    assert config.content_moderation.rules["hate_speech"].level == "standard"


def test_additive_topics_extend_global_topics() -> None:
    base = BlockedTopics(presets={"politics": True}, custom=["taxes"])
    voice = voice_with(
        ModerationOverride(
            blocked_topics=TopicsOverride(
                mode="additive", presets={"religion": True, "politics": False}, custom=["diets"]
            )
        )
    )

    config = resolve_generative_config(
        voice, global_config(blocked_topics=base), api_key_present=True
    )

    topics = config.content_moderation.blocked_topics
    assert topics.presets == {"politics": False, "religion": True}
    assert topics.custom == ["taxes", "diets"]


def test_override_topics_replace_global_topics() -> None:
    base = BlockedTopics(presets={"politics": True}, custom=["taxes"])
    voice = voice_with(
        ModerationOverride(
            blocked_topics=TopicsOverride(mode="override", presets={"spoilers": True})
        )
    )

    config = resolve_generative_config(
        voice, global_config(blocked_topics=base), api_key_present=True
    )

    assert config.content_moderation.blocked_topics == BlockedTopics(presets={"spoilers": True})


def test_inherit_topics_keep_global_topics() -> None:
    base = BlockedTopics(presets={"politics": True})
    voice = voice_with(ModerationOverride(blocked_topics=TopicsOverride(mode="inherit")))

    config = resolve_generative_config(
        voice, global_config(blocked_topics=base), api_key_present=True
    )

    assert config.content_moderation.blocked_topics == base


def test_instructions_append_and_override() -> None:
    appended = resolve_generative_config(
        voice_with(
            ModerationOverride(
                custom_instructions=InstructionsOverride(mode="append", text="No puns.")
            )
        ),
        global_config(custom_instructions="Be nice."),
        api_key_present=True,
    )
    replaced = resolve_generative_config(
        voice_with(
            ModerationOverride(
                custom_instructions=InstructionsOverride(mode="override", text="Anything goes.")
            )
        ),
        global_config(custom_instructions="Be nice."),
        api_key_present=True,
    )

    assert (
        appended.content_moderation.custom_instructions
        == "Be nice.\n\nVoice-specific rules:\nNo puns."
    )
    assert replaced.content_moderation.custom_instructions == "Anything goes."


def test_profanity_override_requires_flag() -> None:
    ignored = resolve_generative_config(
        voice_with(ModerationOverride(profanity=ProfanityOverride(mode="block"))),
        global_config(),
        api_key_present=True,
    )
    applied = resolve_generative_config(
        voice_with(
            ModerationOverride(
                profanity=ProfanityOverride(override=True, mode="replace", replacement_word="bleep")
            )
        ),
        global_config(),
        api_key_present=True,
    )

    assert ignored.content_moderation.profanity.mode == "replace"
    assert applied.content_moderation.profanity.replacement_word == "bleep"


def test_scalar_overrides_and_model_override() -> None:
    voice = VoiceConfig(
        alias="robot",
        model_override="openai/gpt-4o-mini",
        generative_override=GenerativeOverride(
            content_moderation=ModerationOverride(enabled=False, on_failure="skip"),
            emotion_enhancement=False,
        ),
    )

    config = resolve_generative_config(voice, global_config(), api_key_present=True)

    assert config.model == "openai/gpt-4o-mini"
    assert config.emotion_enhancement is False
    assert config.content_moderation.enabled is False
    assert config.content_moderation.on_failure == "skip"


def test_global_config_is_not_mutated() -> None:
    base = global_config(blocked_topics=BlockedTopics(custom=["taxes"]))
    voice = voice_with(
        ModerationOverride(blocked_topics=TopicsOverride(mode="additive", custom=["diets"]))
    )

    resolve_generative_config(voice, base, api_key_present=True)

    assert base.content_moderation.blocked_topics.custom == ["taxes"]
