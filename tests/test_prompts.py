from voiceforge.moderation.prompts import (
    build_copyright_prompt,
    build_safety_prompt,
    build_topics_prompt,
    build_voice_direction_prompt,
)
from voiceforge.schemas.moderation import (
    BlockedTopics,
    ModerationConfig,
    ModerationRule,
    ProfanityRule,
    default_rules,
)


def all_rules_off() -> dict[str, ModerationRule]:
    return {key: ModerationRule(level="off") for key in default_rules()}


def test_inactive_configuration_builds_no_classifier_prompts() -> None:
    config = ModerationConfig(
        rules=all_rules_off(),
        profanity=ProfanityRule(mode="allow"),
        blocked_topics=BlockedTopics(),
        custom_instructions="",
    )

    assert build_safety_prompt(config) is None
    assert build_topics_prompt(config.blocked_topics, config.custom_instructions) is None
    assert build_copyright_prompt(config.rules) is None


def test_safety_prompt_lists_active_rules_with_strictness() -> None:
    rules = all_rules_off()
    rules["hate_speech"] = ModerationRule(level="strict")
    rules["violence"] = ModerationRule(level="standard")

    prompt = build_safety_prompt(ModerationConfig(rules=rules))

    assert "HATE SPEECH [STRICT]" in prompt
    assert "VIOLENCE & THREATS:" in prompt
    assert "SEXUAL CONTENT" not in prompt
    assert "EVASION DETECTION" in prompt
    assert '"BLOCKED: [RULE NAME] - [brief reason]"' in prompt


def test_profanity_block_mode_feeds_the_safety_prompt() -> None:
    config = ModerationConfig(
        rules=all_rules_off(),
        profanity=ProfanityRule(mode="block", exceptions=["heck"]),
    )

    prompt = build_safety_prompt(config)

    assert prompt is not None
    assert "PROFANITY" in prompt
    assert "heck" in prompt


def test_profanity_replace_mode_does_not_create_a_safety_prompt() -> None:
    config = ModerationConfig(rules=all_rules_off(), profanity=ProfanityRule(mode="replace"))

    assert build_safety_prompt(config) is None


def test_topics_prompt_lists_blocked_and_allowed_topics() -> None:
    topics = BlockedTopics(presets={"politics": True, "religion": False}, custom=["pineapple pizza"])

    prompt = build_topics_prompt(topics, "No talk about my ex.")

    blocked_section = prompt.split("BLOCKED TOPICS")[1].split("ALLOWED TOPICS")[0]
    allowed_section = prompt.split("ALLOWED TOPICS")[1]
    assert "Politics" in blocked_section
    assert "pineapple pizza" in blocked_section
    assert "Religion" in allowed_section
    assert "No talk about my ex." in prompt
    assert "META-RULE: Topics not listed above are ALLOWED by default." in prompt


def test_topics_prompt_for_custom_instructions_only() -> None:
    prompt = build_topics_prompt(BlockedTopics(), "Never mention speedruns.")

    assert prompt is not None
    assert "BLOCKED TOPICS" not in prompt
    assert "Never mention speedruns." in prompt


def test_unknown_topic_presets_are_ignored() -> None:
    assert build_topics_prompt(BlockedTopics(presets={"not_a_topic": True})) is None


def test_copyright_prompt_sorts_high_risk_first() -> None:
    rules = all_rules_off()
    rules["media_quotes"] = ModerationRule(level="standard")
    rules["song_lyrics"] = ModerationRule(level="strict")

    prompt = build_copyright_prompt(rules)

    assert prompt.index("SONG LYRICS [STRICT] [HIGH RISK]") < prompt.index(
        "MOVIE/TV/BOOK QUOTES [MEDIUM RISK]"
    )


def test_voice_direction_prompt_roles() -> None:
    director = build_voice_direction_prompt(emotion_capable=True)
    plain = build_voice_direction_prompt(emotion_capable=False)

    assert "audio performance director" in director
    assert "audio performance director" not in plain
    assert "text processor" in plain
    for prompt in (director, plain):
        assert "WORD PRESERVATION (CRITICAL)" in prompt


def test_voice_direction_prompt_includes_profanity_replacement() -> None:
    prompt = build_voice_direction_prompt(
        emotion_capable=False,
        profanity=ProfanityRule(mode="replace", replacement_word="bonk", exceptions=["damn"]),
    )

    assert prompt.startswith("PROFANITY REPLACEMENT:")
    assert '"bonk"' in prompt
    assert "do NOT replace these words: damn" in prompt
    assert "replacing profanity" in prompt


def test_voice_direction_prompt_without_replacement() -> None:
    prompt = build_voice_direction_prompt(
        emotion_capable=True, profanity=ProfanityRule(mode="block")
    )

    assert "PROFANITY REPLACEMENT" not in prompt
    assert "replacing profanity" not in prompt
