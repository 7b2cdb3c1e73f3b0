import json
from datetime import datetime, timezone

import pytest

from voiceforge.schemas.queue import ItemStatus, QueueItem
from voiceforge.schemas.voices import VoiceConfig
from voiceforge.services.history import HistoryLog, build_history_entry, history_file_name


def make_entry(text: str, status="completed", **item_fields):
    item = QueueItem(text=text, **item_fields)
    return build_history_entry(item, status)


def test_build_history_entry_snapshots_item() -> None:
    item = QueueItem(
        text="Hello <b>chat</b>",
        alias="robot",
        username="viewer",
        redemption_id="r1",
        reward_id="w1",
        status=ItemStatus.PLAYING,
    )
    item.after_sanitization = "Hello chat"
    item.processed_text = "[excited] Hello chat"
    item.tags_added = ["[excited]"]
    item.history_item_id = "h-1"
    voice = VoiceConfig(alias="robot", elevenlabs_voice_id="voice-1")

    entry = build_history_entry(item, "completed", voice=voice, duration_ms=900)

    assert entry.id == item.id
    assert entry.original_text == "Hello <b>chat</b>"
    assert entry.final_text == "[excited] Hello chat"
    assert entry.text == entry.final_text
    assert entry.characters_used == len("[excited] Hello chat")
    assert entry.voice_alias == "robot"
    assert entry.voice_id == "voice-1"
    assert entry.model_id == "eleven_multilingual_v2"
    assert entry.duration_ms == 900
    assert entry.history_item_id == "h-1"


def test_build_history_entry_without_voice() -> None:
    entry = make_entry("hi", status="error", error="boom")

    assert entry.voice_alias == "unknown"
    assert entry.final_text == "hi"
    assert entry.error == "boom"


@pytest.mark.asyncio
async def test_entries_are_newest_first_and_capped() -> None:
    log = HistoryLog(None, limit=2)

    for text in ("one", "two", "three"):
        await log.add(make_entry(text))

    assert [entry.original_text for entry in log.entries] == ["three", "two"]


@pytest.mark.asyncio
async def test_mark_refunded_replaces_entry() -> None:
    log = HistoryLog(None)
    entry = make_entry("one")
    await log.add(entry)

    updated = log.mark_refunded(entry.id)

    assert updated.refunded is True
    assert log.find(entry.id).refunded is True
    assert entry.refunded is False
    assert log.mark_refunded("missing") is None


@pytest.mark.asyncio
async def test_entries_are_appended_to_daily_jsonl(tmp_path) -> None:
    log = HistoryLog(tmp_path / "history")
    first = make_entry("one")
    second = make_entry("two", status="blocked")

    await log.add(first)
    await log.add(second)

    path = tmp_path / "history" / history_file_name(first.timestamp)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["original_text"] for line in lines] == ["one", "two"]


@pytest.mark.asyncio
async def test_file_logging_can_be_disabled(tmp_path) -> None:
    log = HistoryLog(tmp_path / "history", file_logging_enabled=False)

    await log.add(make_entry("one"))

    assert not (tmp_path / "history").exists()
    assert len(log.entries) == 1


@pytest.mark.asyncio
async def test_load_recent_restores_newest_entries(tmp_path) -> None:
    writer = HistoryLog(tmp_path)
    for text in ("one", "two", "three"):
        await writer.add(make_entry(text))
    path = tmp_path / history_file_name(datetime.now(timezone.utc))
    with path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    reader = HistoryLog(tmp_path, limit=2)
    loaded = reader.load_recent()

    assert loaded == 2
    assert [entry.original_text for entry in reader.entries] == ["three", "two"]


def test_load_recent_without_directory(tmp_path) -> None:
    assert HistoryLog(tmp_path / "missing").load_recent() == 0


def test_history_file_name() -> None:
    moment = datetime(2025, 3, 4, 5, 6, tzinfo=timezone.utc)

    assert history_file_name(moment) == "tts-history-2025-03-04.jsonl"
