"""Character and word caps for a single message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from ..schemas.voices import LengthLimit, MaxLengthConfig, VoiceConfig

TruncatedBy = Literal["characters", "words"]

# A word-boundary cut must keep at least this share of the character budget
BOUNDARY_MIN_RATIO = 0.8


@dataclass
class LengthResult:
    text: str
    was_truncated: bool
    truncated_by: Optional[TruncatedBy]
    char_count: int
    word_count: int


def apply_max_length(text: str, config: Optional[MaxLengthConfig]) -> LengthResult:
    """Truncate ``text`` to the enabled limits.

    The character cap runs first and backs off to the last space when that
    keeps more than 80% of the budget. The word cap then runs on the result.
    Character truncation takes the attribution when both fire.
    """

    if not text:
        return LengthResult("", False, None, 0, 0)

    config = config or MaxLengthConfig()
    chars, words = config.characters, config.words

    result = text
    truncated_by: Optional[TruncatedBy] = None

    if chars.enabled and len(result) > chars.value:
        cut = result[: chars.value]
        last_space = cut.rfind(" ")
        if last_space > chars.value * BOUNDARY_MIN_RATIO:
            cut = cut[:last_space]
        result = cut
        truncated_by = "characters"

    if words.enabled:
        tokens = result.split()
        if len(tokens) > words.value:
            result = " ".join(tokens[: words.value])
            truncated_by = truncated_by or "words"

    return LengthResult(
        text=result,
        was_truncated=truncated_by is not None,
        truncated_by=truncated_by,
        char_count=len(result),
        word_count=len(result.split()),
    )


def resolve_max_length(
    voice: Optional[VoiceConfig], global_config: Optional[MaxLengthConfig]
) -> MaxLengthConfig:
    if voice is not None and voice.ignore_max_message_length:
        return MaxLengthConfig(
            characters=LengthLimit(enabled=False, value=500),
            words=LengthLimit(enabled=False, value=50),
        )
    if voice is not None and voice.max_message_length_override is not None:
        return voice.max_message_length_override
    return global_config or MaxLengthConfig()


__all__ = ["BOUNDARY_MIN_RATIO", "LengthResult", "TruncatedBy", "apply_max_length", "resolve_max_length"]
