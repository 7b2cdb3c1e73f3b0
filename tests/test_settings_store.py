from pathlib import Path

from voiceforge.schemas.app_settings import AppSettings
from voiceforge.schemas.voices import VoiceConfig
from voiceforge.services.settings_store import SettingsStore


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "data" / "app_settings.json")

    settings = store.get_settings()

    assert settings == AppSettings()
    assert not store.path.exists()


def test_replace_persists_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "data" / "app_settings.json"
    store = SettingsStore(path)
    updated = AppSettings(
        voices=[VoiceConfig(alias="robot", elevenlabs_voice_id="v1", volume=80)],
        default_voice_alias="robot",
        manual_moderation_enabled=True,
    )

    store.replace(updated)

    reloaded = SettingsStore(path).get_settings()
    assert reloaded.default_voice_alias == "robot"
    assert reloaded.manual_moderation_enabled is True
    assert reloaded.voices[0].volume == 80


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "app_settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert SettingsStore(path).get_settings() == AppSettings()


def test_invalid_document_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "app_settings.json"
    path.write_text('{"global_volume": 999}', encoding="utf-8")

    assert SettingsStore(path).get_settings().global_volume == 100


def test_reset_to_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "app_settings.json")
    store.replace(AppSettings(global_volume=40))

    reset = store.reset_to_defaults()

    assert reset.global_volume == 100
    assert store.get_settings().global_volume == 100


def test_resolve_voice_falls_back_to_default_then_first() -> None:
    settings = AppSettings(
        voices=[VoiceConfig(alias="a"), VoiceConfig(alias="b")],
        default_voice_alias="b",
    )

    assert settings.resolve_voice("a").alias == "a"
    assert settings.resolve_voice("zzz").alias == "b"
    assert settings.model_copy(update={"default_voice_alias": ""}).resolve_voice(None).alias == "a"
