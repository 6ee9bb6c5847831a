from __future__ import annotations

import json
from pathlib import Path

import pytest

from gpx_track.settings import CAPTURE_ENABLED_KEY, SettingsStore, StorageConfig, parse_bool


class TestParseBool:
    def test_true_values(self) -> None:
        for value in ["1", "true", "TRUE", " yes ", "On", "y", True]:
            assert parse_bool(value, default=False) is True

    def test_false_values(self) -> None:
        for value in ["0", "false", "FALSE", " no ", "Off", "n", False]:
            assert parse_bool(value, default=True) is False

    def test_unknown_value_uses_default(self) -> None:
        assert parse_bool("maybe", default=True) is True
        assert parse_bool(None, default=False) is False


class TestStorageConfig:
    def test_default_paths(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("GPX_TRACK_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        config = StorageConfig.from_env()

        assert config.track_file == tmp_path / ".gpx_track" / "track.trk"
        assert config.settings_file == tmp_path / ".gpx_track" / "settings.json"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("GPX_TRACK_HOME", f" {tmp_path / 'elsewhere'} ")

        assert StorageConfig.from_env().track_file == tmp_path / "elsewhere" / "track.trk"


class TestSettingsStore:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        store = SettingsStore(tmp_path / "settings.json")

        assert store.last_track_path is None
        assert store.capture_enabled is False

    def test_values_survive_flush(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "settings.json"
        store = SettingsStore(path)
        store.last_track_path = tmp_path / "walk.gpx"
        store.capture_enabled = True
        store.flush()

        reloaded = SettingsStore(path)
        assert reloaded.last_track_path == tmp_path / "walk.gpx"
        assert reloaded.capture_enabled is True
        assert not path.with_suffix(".json.tmp").exists()

    def test_unchanged_store_is_not_rewritten(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        store = SettingsStore(path)
        store.flush()
        assert not path.exists()

        store.capture_enabled = False
        store.flush()
        mtime = path.stat().st_mtime_ns
        store.capture_enabled = False
        store.flush()
        assert path.stat().st_mtime_ns == mtime

    def test_textual_flag_is_parsed(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({CAPTURE_ENABLED_KEY: "yes"}), encoding="utf-8")

        assert SettingsStore(path).capture_enabled is True

    def test_corrupt_file_is_backed_up(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")

        store = SettingsStore(path)

        assert store.capture_enabled is False
        assert path.with_suffix(".json.broken").read_text(encoding="utf-8") == "{broken"

    def test_undecodable_file_is_backed_up(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_bytes(b"\xff\xfe{")

        store = SettingsStore(path)

        assert store.capture_enabled is False
        assert path.with_suffix(".json.broken").read_bytes() == b"\xff\xfe{"
