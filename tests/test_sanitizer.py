import pytest

from voiceforge.pipeline.emojis import describe_run, replace_emojis
from voiceforge.pipeline.sanitizer import (
    collapse_spam,
    resolve_sanitization,
    sanitize,
    strip_code,
    strip_html,
    strip_zalgo,
)
from voiceforge.schemas.voices import SanitizationConfig, VoiceConfig


def test_repeated_word_collapses_to_count_phrase() -> None:
    result = sanitize("GO GO GO GO GO GO GO GO")

    assert result.text == "GO, so many of them"
    assert "GO GO" not in result.text
    assert result.applied == ["spam"]


@pytest.mark.parametrize(
    ("repeats", "phrase"),
    [
        (6, "times 6"),
        (7, "so many of them"),
        (9, "so many of them"),
        (10, "a whole wall of them"),
    ],
)
def test_repeated_word_tiers(repeats: int, phrase: str) -> None:
    text = " ".join(["spam"] * repeats)

    assert collapse_spam(text) == f"spam, {phrase}"


def test_five_repeats_are_left_alone() -> None:
    text = "no no no no no"

    assert collapse_spam(text) == text


def test_absurdly_long_number_keeps_preview() -> None:
    digits = "12345678901234567890123456789012345"
    assert len(digits) == 35

    result = sanitize(f"call me {digits}")

    assert result.text == "call me 123... an absurdly long number"


@pytest.mark.parametrize(
    ("length", "phrase"),
    [(10, "a long number"), (14, "a long number"), (15, "a very long number"), (29, "a very long number")],
)
def test_long_number_tiers(length: int, phrase: str) -> None:
    digits = "9" * length

    assert collapse_spam(digits) == f"999... {phrase}"


def test_short_numbers_are_kept() -> None:
    assert collapse_spam("room 123456789") == "room 123456789"


def test_spam_step_runs_even_when_everything_is_disabled() -> None:
    result = sanitize("ha ha ha ha ha ha", SanitizationConfig.disabled())

    assert result.text == "ha, times 6"


def test_strip_html_removes_tags_and_decodes_entities() -> None:
    assert strip_html("<b>Tom</b> &amp; <i>Jerry</i> &NBSP;rule") == "Tom & Jerry  rule"


def test_strip_html_unwraps_escaped_markup() -> None:
    assert strip_html("&amp;lt;b&amp;gt;hi&amp;lt;/b&amp;gt;") == "hi"
    assert strip_html("5 &amp;lt; 6") == "5 < 6"


def test_strip_code_removes_fenced_and_inline_code() -> None:
    text = "look ```print('hi')\nexit()``` at `this` now"

    assert " ".join(strip_code(text).split()) == "look at now"


def test_strip_zalgo_removes_combining_marks() -> None:
    assert strip_zalgo("he\u0301\u0302llo\u0336") == "hello"


def test_emoji_runs_scale_with_count() -> None:
    assert describe_run("fire", 2).strip() == "double fire"
    assert describe_run("fire", 3).strip() == "fire times 3"
    assert describe_run("fire", 5).strip() == "so many fire"
    assert describe_run("fire", 7).strip() == "a whole wall of fire"


def test_replace_emojis_describes_and_drops() -> None:
    assert replace_emojis("gg 👍👍") == "gg double thumbs up"
    assert replace_emojis("lol 😂😂😂") == "lol crying laughing times 3"
    assert replace_emojis("hi 🤖 there") == "hi robot there"
    # Unicorn has no spoken description and is dropped
    assert replace_emojis("nice \U0001F984") == "nice"


@pytest.mark.parametrize("glyph", ["\u23f0", "\u231b", "\u2b1b", "\U0001F004", "\u2b06\ufe0f"])
def test_unmapped_emoji_outside_pictograph_blocks_are_dropped(glyph: str) -> None:
    assert replace_emojis(f"wake up {glyph} now") == "wake up now"
    assert sanitize(f"wake up {glyph} now").text == "wake up now"


def test_bracket_tags_are_filtered_and_lowercased() -> None:
    result = sanitize("[LAUGHS] hello [evil voice] there")

    assert result.text == "[laughs] hello there"
    assert result.applied == ["brackets"]


def test_steps_are_reported_in_order() -> None:
    result = sanitize("<p>wow</p> `code` 👍")

    assert result.text == "wow thumbs up"
    assert result.applied == ["html", "code", "emojis"]


def test_whitespace_is_normalized_without_audit_entry() -> None:
    result = sanitize("  hello   world \n")

    assert result.text == "hello world"
    assert result.applied == []


def test_empty_text() -> None:
    result = sanitize("")

    assert result.text == ""
    assert result.applied == []


@pytest.mark.parametrize(
    "text",
    [
        "hello chat how is everyone doing",
        "<b>bold</b> move &amp; more",
        "&amp;lt;b&amp;gt;escaped&amp;lt;/b&amp;gt; markup",
        "GO GO GO GO GO GO GO GO",
        "1234567890123456789012345678901234567890 wow",
        "🔥🔥🔥🔥 let's go [Whispers] [nope]",
        "z\u0335a\u0336l\u0337g\u0338o text",
    ],
)
def test_sanitize_is_idempotent(text: str) -> None:
    once = sanitize(text).text

    assert sanitize(once).text == once
    assert sanitize(once).applied == []


def test_voice_ignore_sanitization_disables_all_toggles() -> None:
    voice = VoiceConfig(alias="raw", ignore_sanitization=True)

    config = resolve_sanitization(voice, SanitizationConfig())

    assert config == SanitizationConfig.disabled()


def test_voice_opt_outs_apply_on_top_of_global() -> None:
    voice = VoiceConfig(alias="v3", allow_user_bracket_tags=True, allow_emojis=True)
    global_config = SanitizationConfig(strip_code_blocks=False)

    config = resolve_sanitization(voice, global_config)

    assert config.strip_user_bracket_tags is False
    assert config.replace_emojis is False
    assert config.strip_zalgo_text is True
    assert config.strip_code_blocks is False
    # Global config is not mutated
    assert global_config.replace_emojis is True


def test_zalgo_step_keeps_emoji_variation_selectors() -> None:
    result = sanitize("love you \u2764\ufe0f")

    assert result.text == "love you heart"
