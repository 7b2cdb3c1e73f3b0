"""Input sanitisation ahead of replacement rules and moderation."""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..schemas.voices import SanitizationConfig, VoiceConfig
from .directives import strip_disallowed_tags
from .emojis import replace_emojis

logger = logging.getLogger(__name__)

_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
_HTML_ENTITY_PATTERN = re.compile(r"&(nbsp|amp|lt|gt|quot|#39|apos);", re.IGNORECASE)
_HTML_ENTITY_VALUES = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "#39": "'",
    "apos": "'",
}
_MAX_HTML_PASSES = 8
_FENCED_CODE_PATTERN = re.compile(r"```.*?```", re.DOTALL)
_INLINE_CODE_PATTERN = re.compile(r"`[^`]+`")
_LONG_NUMBER_PATTERN = re.compile(r"\d{10,}")
_REPEATED_WORD_PATTERN = re.compile(r"\b(\w+)(?:\s+\1){5,}\b", re.IGNORECASE)
_VARIATION_SELECTOR_MIN = "\uFE00"
_VARIATION_SELECTOR_MAX = "\uFE0F"


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def strip_html(text: str) -> str:
    """Strip tags and decode common entities until the text stops changing.

    Escaped markup such as ``&amp;lt;b&amp;gt;`` is unwrapped one layer per
    pass, so running the result through again leaves it as is.
    """

    result = text
    for _ in range(_MAX_HTML_PASSES):
        stripped = _HTML_TAG_PATTERN.sub("", result)
        decoded = _HTML_ENTITY_PATTERN.sub(
            lambda match: _HTML_ENTITY_VALUES[match.group(1).lower()], stripped
        )
        if decoded == result:
            break
        result = decoded
    return result


def strip_code(text: str) -> str:
    result = _FENCED_CODE_PATTERN.sub("", text)
    return _INLINE_CODE_PATTERN.sub("", result)


def strip_zalgo(text: str) -> str:
    """Remove non-spacing combining marks used to stack diacritics.

    Emoji variation selectors are also category Mn and are kept.
    """

    return "".join(
        ch
        for ch in text
        if unicodedata.category(ch) != "Mn"
        or _VARIATION_SELECTOR_MIN <= ch <= _VARIATION_SELECTOR_MAX
    )


def _describe_long_number(match: re.Match[str]) -> str:
    digits = match.group(0)
    preview = digits[:3]
    if len(digits) >= 30:
        return f"{preview}... an absurdly long number"
    if len(digits) >= 15:
        return f"{preview}... a very long number"
    return f"{preview}... a long number"


def _describe_repeated_word(match: re.Match[str]) -> str:
    word = match.group(1)
    count = len(match.group(0).split())
    if count >= 10:
        return f"{word}, a whole wall of them"
    if count >= 7:
        return f"{word}, so many of them"
    return f"{word}, times {count}"


def collapse_spam(text: str) -> str:
    """Shorten long digit runs and words repeated six or more times in a row."""

    result = _LONG_NUMBER_PATTERN.sub(_describe_long_number, text)
    result = _REPEATED_WORD_PATTERN.sub(_describe_repeated_word, result)
    return normalize_whitespace(result)


@dataclass
class SanitizationResult:
    text: str
    applied: list[str] = field(default_factory=list)


def _steps(config: SanitizationConfig) -> list[tuple[str, bool, Callable[[str], str]]]:
    return [
        ("html", config.strip_html_tags, strip_html),
        ("code", config.strip_code_blocks, strip_code),
        ("zalgo", config.strip_zalgo_text, strip_zalgo),
        ("emojis", config.replace_emojis, replace_emojis),
        ("spam", True, collapse_spam),
        ("brackets", config.strip_user_bracket_tags, strip_disallowed_tags),
    ]


def sanitize(text: str, config: Optional[SanitizationConfig] = None) -> SanitizationResult:
    """Run the sanitiser steps in order and record which ones changed the text."""

    if not text:
        return SanitizationResult(text="")

    config = config or SanitizationConfig()
    result = text
    applied: list[str] = []
    for name, enabled, step in _steps(config):
        if not enabled:
            continue
        before = result
        result = step(result)
        if result != before:
            applied.append(name)

    result = normalize_whitespace(result)
    if applied:
        logger.debug("Sanitization applied: %s", ", ".join(applied))
    return SanitizationResult(text=result, applied=applied)


def resolve_sanitization(
    voice: Optional[VoiceConfig], global_config: Optional[SanitizationConfig]
) -> SanitizationConfig:
    """Layer the voice opt-outs over the global sanitiser toggles."""

    if voice is not None and voice.ignore_sanitization:
        return SanitizationConfig.disabled()

    config = (global_config or SanitizationConfig()).model_copy()
    if voice is None:
        return config
    if voice.allow_user_bracket_tags:
        config.strip_user_bracket_tags = False
    if voice.allow_zalgo_text:
        config.strip_zalgo_text = False
    if voice.allow_emojis:
        config.replace_emojis = False
    return config


__all__ = [
    "SanitizationResult",
    "collapse_spam",
    "normalize_whitespace",
    "resolve_sanitization",
    "sanitize",
    "strip_code",
    "strip_html",
    "strip_zalgo",
]
