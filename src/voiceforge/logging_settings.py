"""Per-group log levels and retention read from ``logging_settings.conf``.

The file holds ``key = value`` lines. ``terminal`` sets the console level,
``pipeline`` and ``history`` set the level of the loggers in that group (see
``LOGGER_GROUPS``), and ``retention_hours`` bounds how long app logs and
history files are kept. Problems with the file never stop startup: the bad
entry keeps its default and a warning is collected for the caller to log once
logging is configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

_LEVEL_MAP: dict[str, int | None] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "off": None,
}

LOGGER_GROUPS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "pipeline": (
            "voiceforge.pipeline",
            "voiceforge.moderation",
            "voiceforge.openrouter",
        ),
        "history": (
            "voiceforge.scheduler",
            "voiceforge.services.history",
        ),
    }
)

_TERMINAL_KEY = "terminal"
_RETENTION_KEY = "retention_hours"
_DEFAULT_LEVEL = logging.INFO
_DEFAULT_RETENTION_HOURS = 72


@dataclass(frozen=True)
class LoggingSettings:
    terminal_level: int | None = _DEFAULT_LEVEL
    group_levels: Mapping[str, int | None] = field(
        default_factory=lambda: {group: _DEFAULT_LEVEL for group in LOGGER_GROUPS}
    )
    retention_hours: int = _DEFAULT_RETENTION_HOURS
    warnings: tuple[str, ...] = ()

    @property
    def pipeline_level(self) -> int | None:
        return self.group_levels["pipeline"]

    @property
    def history_level(self) -> int | None:
        return self.group_levels["history"]

    @property
    def app_level(self) -> int:
        """Level for the ``voiceforge`` root logger; terminal ``off`` still logs to file."""
        return self.terminal_level or logging.INFO


def _parse_level(name: str, value: str, warnings: list[str]) -> int | None:
    normalized = value.strip().lower()
    if normalized in _LEVEL_MAP:
        return _LEVEL_MAP[normalized]
    warnings.append(
        f"Unknown level {value!r} for {name!r}; expected one of "
        f"{', '.join(_LEVEL_MAP)}. Using info."
    )
    return _DEFAULT_LEVEL


def _parse_retention(value: str, warnings: list[str]) -> int:
    try:
        hours = int(value)
    except ValueError:
        warnings.append(
            f"retention_hours must be a whole number, got {value!r}; "
            f"keeping {_DEFAULT_RETENTION_HOURS}"
        )
        return _DEFAULT_RETENTION_HOURS
    if hours < 0:
        warnings.append(f"retention_hours {hours} is negative; logs will be kept forever")
        return 0
    return hours


def parse_logging_settings(path: Path) -> LoggingSettings:
    """Read ``path``; a missing file gives info everywhere and the default retention."""

    terminal_level: int | None = _DEFAULT_LEVEL
    group_levels: dict[str, int | None] = {group: _DEFAULT_LEVEL for group in LOGGER_GROUPS}
    retention_hours = _DEFAULT_RETENTION_HOURS
    warnings: list[str] = []

    if path.exists():
        for number, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                warnings.append(f"{path.name}:{number}: ignoring line without '='")
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            normalized_key = key.lower()
            if normalized_key == _TERMINAL_KEY:
                terminal_level = _parse_level(normalized_key, value, warnings)
            elif normalized_key in LOGGER_GROUPS:
                group_levels[normalized_key] = _parse_level(normalized_key, value, warnings)
            elif normalized_key == _RETENTION_KEY:
                retention_hours = _parse_retention(value, warnings)
            else:
                known = ", ".join((_TERMINAL_KEY, *LOGGER_GROUPS, _RETENTION_KEY))
                warnings.append(f"{path.name}:{number}: unknown key {key!r} (known: {known})")

    return LoggingSettings(
        terminal_level=terminal_level,
        group_levels=MappingProxyType(group_levels),
        retention_hours=retention_hours,
        warnings=tuple(warnings),
    )


def apply_group_levels(settings: LoggingSettings) -> None:
    """Set or disable every logger in each group. A group at ``off`` is silenced."""

    for group, names in LOGGER_GROUPS.items():
        level = settings.group_levels.get(group, _DEFAULT_LEVEL)
        for name in names:
            logger = logging.getLogger(name)
            logger.disabled = level is None
            if level is not None:
                logger.setLevel(level)


__all__ = ["LOGGER_GROUPS", "LoggingSettings", "apply_group_levels", "parse_logging_settings"]
