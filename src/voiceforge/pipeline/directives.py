"""Bracketed synthesis directive tags (``[laughs]``, ``[whispers]``...)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Tags the emotion-capable synthesis model performs rather than reads aloud.
ALLOWED_DIRECTIVE_TAGS: frozenset[str] = frozenset(
    {
        # Vocalizations
        "[laughs]",
        "[laugh]",
        "[laughter]",
        "[sighs]",
        "[sigh]",
        "[gasps]",
        "[gasp]",
        "[whispers]",
        "[whisper]",
        "[gulps]",
        "[gulp]",
        # Emotional states
        "[excited]",
        "[nervous]",
        "[frustrated]",
        "[calm]",
        "[sorrowful]",
        # Delivery
        "[pauses]",
        "[pause]",
        "[hesitates]",
        # Tone
        "[cheerfully]",
        "[flatly]",
        "[deadpan]",
        "[playfully]",
        "[sarcastically]",
    }
)

NEUTRAL_TAG = "[neutral]"


def is_emotion_capable(model_id: str | None) -> bool:
    """Only v3 synthesis models perform directive tags instead of reading them."""

    return bool(model_id) and "v3" in model_id.lower()


_USER_TAG_PATTERN = re.compile(r"\[[^\]]*\]")
_GENERATED_TAG_PATTERN = re.compile(r"\[[^\]]+\]")
_TRAILING_TAG_PATTERN = re.compile(r"\s*\[[^\]]+\]\s*$")


def strip_disallowed_tags(text: str) -> str:
    """Drop bracketed tags that are not allow-listed and lower-case the rest."""

    def _keep_or_drop(match: re.Match[str]) -> str:
        tag = match.group(0).lower()
        return tag if tag in ALLOWED_DIRECTIVE_TAGS else ""

    return _USER_TAG_PATTERN.sub(_keep_or_drop, text)


@dataclass
class DirectiveTagResult:
    text: str
    tags_found: list[str] = field(default_factory=list)


def postprocess_directive_tags(text: str) -> DirectiveTagResult:
    """Normalise performance tags in generated text.

    Every tag is lower-cased (the synthesis model reads capitalised brackets
    literally) and a tag at the very end, which has nothing left to perform,
    is removed. Free-form tags are kept as-is apart from casing.
    """

    if not text:
        return DirectiveTagResult(text="")

    found: list[str] = []

    def _lower(match: re.Match[str]) -> str:
        tag = match.group(0).lower()
        found.append(tag)
        return tag

    result = _GENERATED_TAG_PATTERN.sub(_lower, text)
    result = _TRAILING_TAG_PATTERN.sub("", result, count=1)
    return DirectiveTagResult(text=" ".join(result.split()), tags_found=found)


__all__ = [
    "ALLOWED_DIRECTIVE_TAGS",
    "DirectiveTagResult",
    "NEUTRAL_TAG",
    "is_emotion_capable",
    "postprocess_directive_tags",
    "strip_disallowed_tags",
]
