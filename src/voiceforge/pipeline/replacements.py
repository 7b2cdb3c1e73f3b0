"""Ordered pattern substitution (global rules, then voice rules)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal, Optional, Sequence

from ..errors import RuleError
from ..schemas.voices import ReplacementRule, VoiceConfig

logger = logging.getLogger(__name__)

_INLINE_FLAGS_PATTERN = re.compile(r"^\(\?([imsuxy]+)\)")
# $$, $&, $1..$99 as used by saved rule sets
_TEMPLATE_TOKEN_PATTERN = re.compile(r"\$(\$|&|\d{1,2})")

Replacer = Callable[[str], str]


def parse_inline_flags(pattern: str) -> tuple[str, str]:
    """Split a leading ``(?ims)`` group off ``pattern``.

    Returns the remaining pattern and the subset of ``ims`` flags found.
    Other flag letters are accepted but ignored.
    """

    match = _INLINE_FLAGS_PATTERN.match(pattern)
    if not match:
        return pattern, ""
    flags = "".join(flag for flag in "ims" if flag in match.group(1))
    return pattern[match.end() :], flags


def _expand_template(template: str, match: re.Match[str]) -> str:
    def _token(token: re.Match[str]) -> str:
        value = token.group(1)
        if value == "$":
            return "$"
        if value == "&":
            return match.group(0)
        index = int(value)
        if index > (match.re.groups or 0):
            # Two-digit reference to a missing group falls back to one digit
            if len(value) == 2 and int(value[0]) <= (match.re.groups or 0) and value[0] != "0":
                return (match.group(int(value[0])) or "") + value[1]
            return token.group(0)
        if index == 0:
            return token.group(0)
        return match.group(index) or ""

    return _TEMPLATE_TOKEN_PATTERN.sub(_token, template)


def compile_rule(rule: ReplacementRule) -> Replacer:
    """Build a callable applying ``rule`` to a string.

    Raises ``RuleError`` when a regex rule does not compile.
    """

    replacement = rule.replacement or ""

    if rule.is_regex:
        pattern, inline = parse_inline_flags(rule.pattern)
        flags = 0
        if "i" in inline or not rule.case_sensitive:
            flags |= re.IGNORECASE
        if "m" in inline:
            flags |= re.MULTILINE
        if "s" in inline:
            flags |= re.DOTALL
        try:
            regex = re.compile(pattern, flags)
        except re.error as exc:
            raise RuleError(rule.pattern, str(exc)) from exc
        return lambda text: regex.sub(lambda m: _expand_template(replacement, m), text)

    if rule.case_sensitive:
        return lambda text: text.replace(rule.pattern, replacement)

    literal = re.compile(re.escape(rule.pattern), re.IGNORECASE)
    return lambda text: literal.sub(lambda _m: replacement, text)


def apply_rules(text: str, rules: Iterable[ReplacementRule]) -> str:
    """Apply each enabled rule in order; malformed rules are logged and skipped."""

    result = text
    for rule in rules:
        if not rule.enabled or not rule.pattern:
            continue
        try:
            result = compile_rule(rule)(result)
        except RuleError as exc:
            logger.error("Skipping replacement rule: %s", exc)
    return result


@dataclass
class AppliedRuleSet:
    scope: Literal["global", "voice"]
    count: int
    alias: Optional[str] = None


@dataclass
class ReplacementResult:
    text: str
    applied: list[AppliedRuleSet] = field(default_factory=list)


def apply_replacements(
    text: str,
    voice: Optional[VoiceConfig],
    global_rules: Sequence[ReplacementRule],
) -> ReplacementResult:
    """Run global rules (unless the voice opts out) followed by the voice's own."""

    if not text:
        return ReplacementResult(text="")

    result = text
    applied: list[AppliedRuleSet] = []

    ignore_global = voice is not None and voice.ignore_global_replacements
    if global_rules and not ignore_global:
        before = result
        result = apply_rules(result, global_rules)
        if result != before:
            applied.append(
                AppliedRuleSet(scope="global", count=sum(1 for r in global_rules if r.enabled))
            )

    if voice is not None and voice.replacements:
        before = result
        result = apply_rules(result, voice.replacements)
        if result != before:
            applied.append(
                AppliedRuleSet(
                    scope="voice",
                    alias=voice.alias,
                    count=sum(1 for r in voice.replacements if r.enabled),
                )
            )

    return ReplacementResult(text=result, applied=applied)


@dataclass
class RulePreview:
    result: str
    matched: bool
    error: Optional[str] = None


def preview_rule(text: str, rule: ReplacementRule) -> RulePreview:
    """Apply a single rule for preview purposes without raising."""

    if not text or not rule.pattern:
        return RulePreview(result=text, matched=False)
    try:
        result = compile_rule(rule)(text)
    except RuleError as exc:
        return RulePreview(result=text, matched=False, error=exc.reason)
    return RulePreview(result=result, matched=result != text)


@dataclass
class PatternValidation:
    valid: bool
    error: Optional[str] = None


def validate_pattern(pattern: str) -> PatternValidation:
    if not pattern:
        return PatternValidation(valid=False, error="Pattern is empty")
    cleaned, _flags = parse_inline_flags(pattern)
    try:
        re.compile(cleaned)
    except re.error as exc:
        return PatternValidation(valid=False, error=str(exc))
    return PatternValidation(valid=True)


__all__ = [
    "AppliedRuleSet",
    "PatternValidation",
    "ReplacementResult",
    "RulePreview",
    "apply_replacements",
    "apply_rules",
    "compile_rule",
    "parse_inline_flags",
    "preview_rule",
    "validate_pattern",
]
