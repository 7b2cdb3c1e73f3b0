from voiceforge.moderation.preservation import (
    check_word_preservation,
    extract_spoken_words,
    has_spam_directive,
    significant_words,
)
from voiceforge.schemas.moderation import ProfanityRule


def test_extract_spoken_words_strips_performance_markup() -> None:
    text = "[sighs] *gasp* Hello~ ♪ World [excited, fast]"

    assert extract_spoken_words(text) == "hello world"


def test_significant_words_drop_stop_words_and_short_words() -> None:
    assert significant_words("I am the best at this game, ok?") == {"best", "game"}


def test_transform_sharing_no_words_is_rejected() -> None:
    result = check_word_preservation("hello world", "[excited] goodbye moon")

    assert result.preserved is False
    assert result.ratio == 0
    assert "0%" in result.warning


def test_tagged_transform_is_accepted() -> None:
    result = check_word_preservation(
        "hello world", "[excited] Hello! *laughs* [warm] world~"
    )

    assert result.preserved is True
    assert result.ratio == 1.0


def test_runaway_output_is_rejected_by_length() -> None:
    original = "tell me a story about dragons"
    processed = original + " " + "once upon a time there was a dragon who " * 5

    result = check_word_preservation(original, processed)

    assert result.preserved is False
    assert "longer than input" in result.warning


def test_short_inputs_skip_the_length_check() -> None:
    result = check_word_preservation("hype train", "[excited] hype train! hype train! hype!")

    assert result.preserved is True


def test_profanity_replacement_counts_as_preserved() -> None:
    profanity = ProfanityRule(mode="replace", replacement_word="quack")

    result = check_word_preservation(
        "what the fuck dude", "[shocked] what the quack dude", profanity
    )

    assert result.preserved is True


def test_text_without_significant_words_is_preserved() -> None:
    assert check_word_preservation("ok", "[calm] no").preserved is True


def test_spam_directive_marker() -> None:
    assert has_spam_directive("**Spam detected: repeated word** hi")
    assert not has_spam_directive("just a normal message")
