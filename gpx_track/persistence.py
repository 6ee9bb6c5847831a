"""Saving and restoring the session track across restarts."""

from __future__ import annotations

import logging
from pathlib import Path

from gpx_track.capture import FixSource
from gpx_track.errors import TrackDecodeError, TrackIoError
from gpx_track.gpx_io import read_track, write_track
from gpx_track.models import Track
from gpx_track.session import TrackSession
from gpx_track.settings import SettingsStore, StorageConfig

logger = logging.getLogger(__name__)


class PersistenceController:
    """Decides when the session track must be (re)written to storage."""

    def __init__(self, session: TrackSession, settings: SettingsStore, track_file: str | Path) -> None:
        self._session = session
        self._settings = settings
        self._track_file = Path(track_file)

    @classmethod
    def from_config(cls, session: TrackSession, settings: SettingsStore, config: StorageConfig) -> PersistenceController:
        return cls(session, settings, config.track_file)

    @property
    def session(self) -> TrackSession:
        return self._session

    @property
    def track_file(self) -> Path:
        return self._track_file

    def save(self) -> bool:
        """Persist capture state and, if needed, the track.

        Returns:
            True if the track file was written.

        Raises:
            TrackIoError: Settings or track file cannot be written/removed.
        """

        try:
            self._settings.capture_enabled = self._session.capture_enabled
            self._settings.flush()
        except OSError as exc:
            raise TrackIoError(f"无法写入设置文件：{self._settings.path}") from exc

        track = self._session.track
        if track is None:
            try:
                self._track_file.unlink(missing_ok=True)
            except OSError as exc:
                raise TrackIoError(f"无法删除轨迹文件：{self._track_file}") from exc
            logger.info("no track attached, removed %s", self._track_file)
            return False

        if not track.dirty:
            return False

        try:
            self._track_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise TrackIoError(f"无法创建目录：{self._track_file.parent}") from exc
        write_track(track, self._track_file)
        return True

    def restore(self, fix_source: FixSource | None = None) -> Track | None:
        """Load the persisted track (if any) and re-enable capture if it was on.

        The restored track matches storage, so it is marked clean. A missing
        file means there was no previous track. A file that does not decode is
        moved aside to ``<name>.broken`` so a later save cannot delete it.

        Args:
            fix_source: Where to capture from when the capture setting is on.

        Returns:
            The restored track, or None.

        Raises:
            TrackIoError: The persisted file exists but cannot be read.
        """

        track: Track | None = None
        if self._track_file.is_file():
            try:
                track = read_track(self._track_file, imported=False)
            except TrackDecodeError as exc:
                backup = self._backup_broken_file()
                logger.warning("无法恢复轨迹 %s：%s（已备份到 %s）", self._track_file, exc, backup)
            else:
                self._session.adopt(track)
                logger.info("restored %s segments from %s", len(track.segments), self._track_file)

        if self._settings.capture_enabled and fix_source is not None and not self._session.capture_enabled:
            self._session.set_capture(True, fix_source)
        return track

    def _backup_broken_file(self) -> Path:
        # 轨迹文件损坏：移到一边，避免后续 save() 把它删掉
        backup = self._track_file.with_name(self._track_file.name + ".broken")
        try:
            self._track_file.replace(backup)
        except OSError as exc:
            raise TrackIoError(f"无法备份损坏的轨迹文件：{self._track_file}") from exc
        return backup
