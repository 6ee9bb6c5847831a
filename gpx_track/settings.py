"""Storage locations and persisted user settings.

Settings are a tiny JSON key/value file. Only two keys are used:

    - ``track_path``: last file used for import/export
    - ``track_capture_enabled``: whether capture was on at last save
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

logger = logging.getLogger(__name__)

TRACK_PATH_KEY: Final[str] = "track_path"
CAPTURE_ENABLED_KEY: Final[str] = "track_capture_enabled"
DATA_DIR_ENV: Final[str] = "GPX_TRACK_HOME"


def _default_data_dir() -> Path:
    return Path.home() / ".gpx_track"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where the persisted track and settings live."""

    data_dir: Path = field(default_factory=_default_data_dir)
    track_filename: str = "track.trk"
    settings_filename: str = "settings.json"

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Use ``$GPX_TRACK_HOME`` as data dir when set, else the default."""

        raw = os.getenv(DATA_DIR_ENV, "").strip()
        if raw:
            return cls(data_dir=Path(raw).expanduser())
        return cls()

    @property
    def track_file(self) -> Path:
        return self.data_dir / self.track_filename

    @property
    def settings_file(self) -> Path:
        return self.data_dir / self.settings_filename


def parse_bool(value: Any, default: bool = False) -> bool:
    """Parse a boolean-like value with a fallback default."""

    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


class SettingsStore:
    """A JSON settings file persisted on disk (key -> scalar)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data: dict[str, Any] = {}
        self._loaded = False
        self._changed = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """Load settings from disk (no-op if file not exists)."""

        if self._loaded:
            return
        self._loaded = True
        if not self._path.exists():
            self._data = {}
            return
        raw = self._path.read_bytes()
        if not raw.strip():
            self._data = {}
            return
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            data = None
        if not isinstance(data, dict):
            # 设置文件损坏：备份后重新开始
            backup = self._path.with_suffix(self._path.suffix + ".broken")
            backup.write_bytes(raw)
            logger.warning("设置文件损坏，已备份到 %s", backup)
            data = {}
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        self.load()
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.load()
        if key in self._data and self._data[key] == value:
            return
        self._data[key] = value
        self._changed = True

    def flush(self) -> None:
        """Persist settings to disk (atomic-ish); skipped when nothing changed."""

        self.load()
        if not self._changed:
            return
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        self._changed = False

    @property
    def last_track_path(self) -> Path | None:
        raw = self.get(TRACK_PATH_KEY)
        if not raw:
            return None
        return Path(str(raw))

    @last_track_path.setter
    def last_track_path(self, value: str | Path | None) -> None:
        self.set(TRACK_PATH_KEY, None if value is None else str(value))

    @property
    def capture_enabled(self) -> bool:
        return parse_bool(self.get(CAPTURE_ENABLED_KEY), default=False)

    @capture_enabled.setter
    def capture_enabled(self, value: bool) -> None:
        self.set(CAPTURE_ENABLED_KEY, bool(value))
