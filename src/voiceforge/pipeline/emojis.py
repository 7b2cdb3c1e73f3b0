"""Spoken descriptions for the emoji chat uses most."""

from __future__ import annotations

import re

import emoji

EMOJI_DESCRIPTIONS: dict[str, str] = {
    # Faces, positive
    "😂": "crying laughing",
    "🤣": "rolling on the floor laughing",
    "😄": "grinning",
    "😁": "beaming",
    "😆": "laughing",
    "😊": "smiling",
    "🙂": "slightly smiling",
    "😉": "winky face",
    "😍": "heart eyes",
    "🥰": "smiling with hearts",
    "😘": "blowing a kiss",
    "😎": "cool sunglasses",
    "🤩": "star struck",
    "🥳": "party face",
    "😏": "smirking",
    # Faces, negative and other
    "😢": "crying",
    "😭": "sobbing",
    "😱": "screaming",
    "😡": "angry face",
    "🤬": "swearing",
    "😤": "huffing",
    "🙄": "eye roll",
    "😑": "expressionless",
    "🤔": "thinking",
    "🤯": "mind blown",
    "😳": "flushed",
    "😬": "grimacing",
    "🫠": "melting face",
    "💀": "skull",
    "☠️": "skull and crossbones",
    "🤡": "clown",
    "👻": "ghost",
    "😴": "sleeping",
    # Gestures
    "👍": "thumbs up",
    "👎": "thumbs down",
    "👏": "clapping",
    "🙏": "praying hands",
    "🤝": "handshake",
    "✌️": "peace sign",
    "🤙": "call me hand",
    "👋": "waving",
    "🫡": "salute",
    "🖕": "middle finger",
    # Hearts and symbols
    "❤️": "heart",
    "🧡": "orange heart",
    "💛": "yellow heart",
    "💚": "green heart",
    "💙": "blue heart",
    "💜": "purple heart",
    "🖤": "black heart",
    "🤍": "white heart",
    "💔": "broken heart",
    "💯": "hundred",
    "✅": "check mark",
    "❌": "X mark",
    "⭐": "star",
    "🌟": "glowing star",
    "✨": "sparkles",
    # Objects
    "🔥": "fire",
    "💪": "flexing",
    "🎉": "party popper",
    "🎊": "confetti",
    "🏆": "trophy",
    "🥇": "gold medal",
    "🎮": "game controller",
    "🎯": "bullseye",
    "💰": "money bag",
    "💎": "gem",
    "🚀": "rocket",
    "💣": "bomb",
    "⚡": "lightning",
    "🔔": "bell",
    "🎵": "music note",
    "🎶": "music notes",
    "👀": "eyes",
    "👁️": "eye",
    "🧠": "brain",
    "💤": "zzz",
    # Animals
    "🐐": "goat",
    "🐍": "snake",
    "🦊": "fox",
    "🐸": "frog",
    "🐶": "dog",
    "🐱": "cat",
    "🦁": "lion",
    "🐻": "bear",
    # Flags and misc
    "🏳️": "white flag",
    "🚩": "red flag",
    "💩": "poop",
    "🤖": "robot",
    "👑": "crown",
    "🧢": "cap",
}

# Joiners and variation selectors left behind once mapped emoji are spoken
_LEFTOVER_JOINERS = re.compile("[\u200d\ufe0e\ufe0f]")

_REPEAT_PATTERNS: dict[str, re.Pattern[str]] = {
    glyph: re.compile(rf"(?:{re.escape(glyph)}\s*){{2,}}")
    for glyph in EMOJI_DESCRIPTIONS
}


def describe_run(description: str, count: int) -> str:
    """Return the spoken phrase for ``count`` consecutive copies of one emoji."""

    if count >= 7:
        return f" a whole wall of {description} "
    if count >= 4:
        return f" so many {description} "
    if count >= 3:
        return f" {description} times {count} "
    return f" double {description} "


def replace_emojis(text: str) -> str:
    """Collapse runs, describe single emoji, then drop anything left unmapped."""

    if not text:
        return text

    result = text
    for glyph, description in EMOJI_DESCRIPTIONS.items():
        if glyph not in result:
            continue
        result = _REPEAT_PATTERNS[glyph].sub(
            lambda match, g=glyph, d=description: describe_run(d, match.group(0).count(g)),
            result,
        )

    for glyph, description in EMOJI_DESCRIPTIONS.items():
        if glyph in result:
            result = result.replace(glyph, f" {description} ")

    result = emoji.replace_emoji(result, replace="")
    result = _LEFTOVER_JOINERS.sub("", result)
    return " ".join(result.split())


__all__ = ["EMOJI_DESCRIPTIONS", "describe_run", "replace_emojis"]
