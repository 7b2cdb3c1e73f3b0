"""Tests for logging settings parsing and logger group levels."""

import logging
from pathlib import Path

import pytest

from voiceforge.logging_settings import (
    LOGGER_GROUPS,
    LoggingSettings,
    apply_group_levels,
    parse_logging_settings,
)


@pytest.fixture
def restore_group_loggers():
    loggers = [logging.getLogger(name) for names in LOGGER_GROUPS.values() for name in names]
    saved = [(logger.level, logger.disabled) for logger in loggers]
    yield
    for logger, (level, disabled) in zip(loggers, saved):
        logger.setLevel(level)
        logger.disabled = disabled


def test_parse_logging_settings_with_retention(tmp_path: Path) -> None:
    config_file = tmp_path / "logging_settings.conf"
    config_file.write_text(
        """
# Test config
terminal = debug
pipeline = info
history = warning
retention_hours = 24
"""
    )

    settings = parse_logging_settings(config_file)

    assert settings.terminal_level == logging.DEBUG
    assert settings.pipeline_level == logging.INFO
    assert settings.history_level == logging.WARNING
    assert settings.retention_hours == 24
    assert settings.warnings == ()


def test_parse_logging_settings_defaults(tmp_path: Path) -> None:
    """Missing file gives INFO everywhere and three days of retention."""
    settings = parse_logging_settings(tmp_path / "nonexistent.conf")

    assert dict(settings.group_levels) == {"pipeline": logging.INFO, "history": logging.INFO}
    assert settings.retention_hours == 72
    assert settings.warnings == ()


def test_unknown_keys_and_levels_are_reported(tmp_path: Path) -> None:
    config_file = tmp_path / "logging_settings.conf"
    config_file.write_text(
        """
Pipeline = DEBUG
history = chatty
sessions = debug
not a setting
"""
    )

    settings = parse_logging_settings(config_file)

    assert settings.pipeline_level == logging.DEBUG
    assert settings.history_level == logging.INFO
    assert settings.terminal_level == logging.INFO
    assert len(settings.warnings) == 3
    chatty, sessions, no_equals = settings.warnings
    assert "'chatty'" in chatty and "'history'" in chatty
    assert "logging_settings.conf:4" in sessions and "'sessions'" in sessions
    assert "logging_settings.conf:5" in no_equals


def test_parse_logging_settings_invalid_retention(tmp_path: Path) -> None:
    config_file = tmp_path / "logging_settings.conf"
    config_file.write_text("retention_hours = invalid\n")

    settings = parse_logging_settings(config_file)

    assert settings.retention_hours == 72
    [warning] = settings.warnings
    assert "whole number" in warning


def test_parse_logging_settings_negative_retention(tmp_path: Path) -> None:
    config_file = tmp_path / "logging_settings.conf"
    config_file.write_text("retention_hours = -10\n")

    settings = parse_logging_settings(config_file)

    assert settings.retention_hours == 0
    [warning] = settings.warnings
    assert "negative" in warning


def test_parse_logging_settings_off_level(tmp_path: Path) -> None:
    config_file = tmp_path / "logging_settings.conf"
    config_file.write_text(
        """
terminal = off
pipeline = off
history = info
"""
    )

    settings = parse_logging_settings(config_file)

    assert settings.terminal_level is None
    assert settings.pipeline_level is None
    assert settings.history_level == logging.INFO
    assert settings.app_level == logging.INFO


def test_apply_group_levels_sets_and_silences_groups(restore_group_loggers) -> None:
    settings = LoggingSettings(group_levels={"pipeline": None, "history": logging.DEBUG})

    apply_group_levels(settings)

    for name in LOGGER_GROUPS["pipeline"]:
        assert logging.getLogger(name).disabled is True
    for name in LOGGER_GROUPS["history"]:
        logger = logging.getLogger(name)
        assert logger.disabled is False
        assert logger.level == logging.DEBUG
