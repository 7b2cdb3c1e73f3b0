import pytest

from voiceforge.pipeline.length import apply_max_length, resolve_max_length
from voiceforge.schemas.voices import LengthLimit, MaxLengthConfig, VoiceConfig


def limits(chars: tuple[bool, int] = (False, 500), words: tuple[bool, int] = (False, 50)):
    return MaxLengthConfig(
        characters=LengthLimit(enabled=chars[0], value=chars[1]),
        words=LengthLimit(enabled=words[0], value=words[1]),
    )


def test_character_limit_backs_off_to_word_boundary() -> None:
    text = "word " * 30

    result = apply_max_length(text.strip(), limits(chars=(True, 50)))

    assert result.text == " ".join(["word"] * 10)
    assert result.was_truncated is True
    assert result.truncated_by == "characters"
    assert result.char_count == 49
    assert result.word_count == 10


def test_character_limit_keeps_hard_cut_when_boundary_is_too_early() -> None:
    text = "a " + "b" * 100

    result = apply_max_length(text, limits(chars=(True, 50)))

    assert result.text == "a " + "b" * 48
    assert result.char_count == 50


def test_word_limit() -> None:
    text = "one two three four five six seven"

    result = apply_max_length(text, limits(words=(True, 5)))

    assert result.text == "one two three four five"
    assert result.truncated_by == "words"
    assert result.word_count == 5


def test_characters_win_attribution_when_both_fire() -> None:
    text = " ".join(f"w{i}" for i in range(200))

    result = apply_max_length(text, limits(chars=(True, 100), words=(True, 5)))

    assert result.truncated_by == "characters"
    assert result.word_count == 5


def test_word_attribution_when_only_words_exceed() -> None:
    text = "a b c d e f g h"

    result = apply_max_length(text, limits(chars=(True, 500), words=(True, 3)))

    assert result.text == "a b c"
    assert result.truncated_by == "words"


def test_within_limits_is_untouched() -> None:
    result = apply_max_length("short message", limits(chars=(True, 100), words=(True, 10)))

    assert result.text == "short message"
    assert result.was_truncated is False
    assert result.truncated_by is None


@pytest.mark.parametrize("length", [5, 20, 21, 60])
def test_single_character_limit_attribution_matches_trigger(length: int) -> None:
    text = "x" * length

    result = apply_max_length(text, limits(chars=(True, 20)))

    assert result.was_truncated is (length > 20)
    assert result.truncated_by == ("characters" if length > 20 else None)


@pytest.mark.parametrize("count", [1, 4, 5, 12])
def test_single_word_limit_attribution_matches_trigger(count: int) -> None:
    text = " ".join(["hey"] * count)

    result = apply_max_length(text, limits(words=(True, 4)))

    assert result.was_truncated is (count > 4)
    assert result.truncated_by == ("words" if count > 4 else None)


def test_disabled_limits_never_truncate() -> None:
    result = apply_max_length("x" * 1000, limits())

    assert result.was_truncated is False
    assert result.char_count == 1000


def test_resolve_max_length_layers() -> None:
    global_config = limits(chars=(True, 100))
    override = limits(words=(True, 3))

    assert resolve_max_length(None, global_config) is global_config
    assert resolve_max_length(VoiceConfig(alias="a"), global_config) is global_config
    assert (
        resolve_max_length(
            VoiceConfig(alias="b", max_message_length_override=override), global_config
        )
        == override
    )

    ignored = resolve_max_length(
        VoiceConfig(alias="c", ignore_max_message_length=True), global_config
    )
    assert ignored.characters.enabled is False
    assert ignored.words.enabled is False
