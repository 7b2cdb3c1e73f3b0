"""In-memory history of finished items with daily JSONL audit files."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..schemas.queue import HistoryEntry, HistoryStatus, QueueItem
from ..schemas.voices import VoiceConfig

logger = logging.getLogger(__name__)

HISTORY_FILE_PREFIX = "tts-history-"
HISTORY_FILE_SUFFIX = ".jsonl"


def history_file_name(moment: datetime) -> str:
    return f"{HISTORY_FILE_PREFIX}{moment.strftime('%Y-%m-%d')}{HISTORY_FILE_SUFFIX}"


def build_history_entry(
    item: QueueItem,
    status: HistoryStatus,
    *,
    voice: Optional[VoiceConfig] = None,
    duration_ms: Optional[int] = None,
    error: Optional[str] = None,
) -> HistoryEntry:
    """Snapshot ``item`` as it leaves the queue."""

    final_text = item.processed_text or item.text
    return HistoryEntry(
        id=item.id,
        timestamp=datetime.now(timezone.utc),
        text=final_text,
        original_text=item.text,
        after_sanitization=item.after_sanitization,
        after_replacements=item.after_replacements,
        after_truncation=item.after_truncation,
        after_moderation=item.after_moderation,
        final_text=final_text,
        moderation_override=item.moderation_override,
        was_truncated=item.was_truncated,
        truncated_by=item.truncated_by,
        sanitization_applied=list(item.sanitization_applied),
        moderation_used=item.moderation_used,
        tags_added=list(item.tags_added),
        usage=item.moderation_usage,
        moderation_model=item.moderation_model,
        moderation_error=item.moderation_error,
        block_reason=item.block_reason,
        characters_used=item.characters_used or len(final_text),
        voice_alias=(voice.alias if voice else item.alias) or "unknown",
        voice_id=voice.elevenlabs_voice_id if voice else None,
        model_id=voice.elevenlabs_model_id if voice else None,
        duration_ms=duration_ms,
        status=status,
        error=error if error is not None else item.error,
        username=item.username,
        redemption_id=item.redemption_id,
        reward_id=item.reward_id,
        refunded=item.refunded,
        history_item_id=item.history_item_id,
    )


class HistoryLog:
    """Newest-first list of ``HistoryEntry`` records capped at ``limit``."""

    def __init__(
        self,
        log_dir: Optional[Path],
        *,
        limit: int = 100,
        file_logging_enabled: bool = True,
    ) -> None:
        self._log_dir = log_dir.resolve() if log_dir is not None else None
        self._limit = limit
        self._file_logging_enabled = file_logging_enabled
        self._entries: list[HistoryEntry] = []

    def configure(self, *, limit: int, file_logging_enabled: bool) -> None:
        self._limit = limit
        self._file_logging_enabled = file_logging_enabled
        del self._entries[limit:]

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def find(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    async def add(self, entry: HistoryEntry) -> None:
        self._entries.insert(0, entry)
        del self._entries[self._limit :]
        if self._file_logging_enabled and self._log_dir is not None:
            try:
                await asyncio.to_thread(self._append_entry, entry)
            except OSError:
                logger.exception("Failed to write history entry %s", entry.id)

    def mark_refunded(self, entry_id: str) -> Optional[HistoryEntry]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                updated = entry.model_copy(update={"refunded": True})
                self._entries[index] = updated
                return updated
        return None

    def clear(self) -> None:
        self._entries.clear()

    def _append_entry(self, entry: HistoryEntry) -> None:
        assert self._log_dir is not None
        self._log_dir.mkdir(parents=True, exist_ok=True)
        path = self._log_dir / history_file_name(entry.timestamp)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(entry.model_dump_json() + "\n")

    def load_recent(self) -> int:
        """Reload the newest entries from the daily files. Returns the count loaded."""

        if self._log_dir is None or not self._log_dir.exists():
            return 0

        files = sorted(
            self._log_dir.glob(f"{HISTORY_FILE_PREFIX}*{HISTORY_FILE_SUFFIX}"),
            reverse=True,
        )
        loaded: list[HistoryEntry] = []
        for path in files:
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except OSError as exc:
                logger.warning("Could not read history file %s: %s", path, exc)
                continue
            for line in reversed(lines):
                if not line.strip():
                    continue
                try:
                    loaded.append(HistoryEntry.model_validate(json.loads(line)))
                except (ValueError, ValidationError):
                    logger.debug("Skipping corrupt history line in %s", path.name)
                if len(loaded) >= self._limit:
                    break
            if len(loaded) >= self._limit:
                break

        self._entries = loaded
        logger.info("Loaded %d history entries from %s", len(loaded), self._log_dir)
        return len(loaded)


__all__ = ["HistoryLog", "build_history_entry", "history_file_name"]
