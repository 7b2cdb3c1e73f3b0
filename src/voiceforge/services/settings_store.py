"""Settings store persisting the operator-editable configuration document."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from voiceforge.schemas.app_settings import AppSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load, cache and persist ``AppSettings`` as a JSON file."""

    def __init__(self, settings_path: Path):
        self._path = settings_path
        self._cached: Optional[AppSettings] = None

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_data_dir(self) -> None:
        """Ensure the data directory exists."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_settings(self) -> AppSettings:
        """Load settings from file or return defaults."""
        if self._cached is not None:
            return self._cached

        if self._path.exists():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
                self._cached = AppSettings.model_validate(data)
                logger.info(f"Loaded app settings from {self._path}")
            except (OSError, ValueError, ValidationError) as e:
                logger.warning(f"Failed to load app settings: {e}, using defaults")
                self._cached = AppSettings()
        else:
            self._cached = AppSettings()
            logger.info("Using default app settings")

        return self._cached

    def replace(self, settings: AppSettings) -> AppSettings:
        """Persist a complete settings document."""
        self._save(settings)
        return settings

    def reset_to_defaults(self) -> AppSettings:
        """Reset settings to defaults."""
        defaults = AppSettings()
        self._save(defaults)
        return defaults

    def _save(self, settings: AppSettings) -> None:
        """Persist settings to file."""
        self._ensure_data_dir()
        self._path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        self._cached = settings
        logger.info(f"Saved app settings to {self._path}")


__all__ = ["SettingsStore"]
