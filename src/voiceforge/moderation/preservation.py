"""Checks that voice direction kept the viewer's words."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..schemas.moderation import ProfanityRule

STOP_WORDS: frozenset[str] = frozenset(
    """
    a an the is are was were be been being
    i you he she it we they my your his her its our their
    to of in for on at by with as and or but so if then
    that this what which who when where how why just not no yes
    """.split()
)

# Text carrying this marker asks for a creative rewrite of the spam
SPAM_DIRECTIVE_MARKER = "**Spam detected:"

MIN_PRESERVATION_RATIO = 0.6
MAX_LENGTH_FACTOR = 2
MIN_LENGTH_FOR_LENGTH_CHECK = 20

_TAG_PATTERN = re.compile(r"\[[^\]]*\]")
_VOCALIZATION_PATTERN = re.compile(r"\*[^*]*\*")
_SUSTAIN_PATTERN = re.compile(r"[♪~]")
_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")


def extract_spoken_words(text: str) -> str:
    """Lower-cased text with tags, vocalizations, ♪ and ~ removed."""

    if not text:
        return ""
    result = _TAG_PATTERN.sub("", text)
    result = _VOCALIZATION_PATTERN.sub("", result)
    result = _SUSTAIN_PATTERN.sub("", result)
    return " ".join(result.split()).lower()


def significant_words(text: str) -> set[str]:
    words = _PUNCTUATION_PATTERN.sub("", text.lower()).split()
    return {word for word in words if len(word) > 2 and word not in STOP_WORDS}


@dataclass
class PreservationResult:
    preserved: bool
    ratio: float
    warning: Optional[str] = None


def check_word_preservation(
    original: str, processed: str, profanity: Optional[ProfanityRule] = None
) -> PreservationResult:
    original_spoken = extract_spoken_words(original)
    processed_spoken = extract_spoken_words(processed)

    if (
        len(original_spoken) > MIN_LENGTH_FOR_LENGTH_CHECK
        and len(processed_spoken) > len(original_spoken) * MAX_LENGTH_FACTOR
    ):
        factor = len(processed_spoken) / len(original_spoken)
        return PreservationResult(
            preserved=False,
            ratio=len(original_spoken) / len(processed_spoken),
            warning=f"Output is {round(factor)}x longer than input, likely generated content",
        )

    original_words = significant_words(original_spoken)
    if not original_words:
        return PreservationResult(preserved=True, ratio=1.0)

    processed_words = significant_words(processed_spoken)
    replacement: Optional[str] = None
    if profanity is not None and profanity.mode == "replace" and profanity.replacement_word:
        replacement = profanity.replacement_word.lower()
    replacement_present = replacement is not None and replacement in processed_words

    kept = sum(
        1 for word in original_words if word in processed_words or replacement_present
    )
    ratio = kept / len(original_words)
    if ratio < MIN_PRESERVATION_RATIO:
        return PreservationResult(
            preserved=False,
            ratio=ratio,
            warning=f"Only {round(ratio * 100)}% of the original words were preserved",
        )
    return PreservationResult(preserved=True, ratio=ratio)


def has_spam_directive(text: str) -> bool:
    return SPAM_DIRECTIVE_MARKER in text


__all__ = [
    "MIN_PRESERVATION_RATIO",
    "PreservationResult",
    "SPAM_DIRECTIVE_MARKER",
    "STOP_WORDS",
    "check_word_preservation",
    "extract_spoken_words",
    "has_spam_directive",
    "significant_words",
]
