"""Host-owned context holding the current track.

The session is passed explicitly to the capture engine and the persistence
controller. It talks to the UI only through the small collaborator interfaces
below (display + presence listeners).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Sequence

from gpx_track.capture import CaptureEngine, FixSource
from gpx_track.errors import ContractViolation
from gpx_track.gpx_io import read_track, write_track
from gpx_track.models import GeoPoint, Track
from gpx_track.settings import SettingsStore

logger = logging.getLogger(__name__)

PresenceListener = Callable[[bool], None]


class TrackDisplay(Protocol):
    """Map widget side of track rendering."""

    def add_track(self, coords: Sequence[tuple[float, float]]) -> None:
        """Draw one polyline of (lat, lon) pairs in degrees."""

    def clear_tracks(self) -> None:
        """Remove every polyline previously drawn."""


@dataclass(frozen=True, slots=True)
class DialogSeed:
    """Starting point for a file chooser.

    Attributes:
        folder: Directory to open the dialog in.
        filename: File to preselect (open) or propose (save), if any.
    """

    folder: Path | None
    filename: str | None


class TrackSession:
    """Owns the current track and the capture engine feeding it."""

    def __init__(self, display: TrackDisplay | None = None, settings: SettingsStore | None = None) -> None:
        self._display = display
        self._settings = settings
        self._track: Track | None = None
        self._listeners: list[PresenceListener] = []
        self.capture = CaptureEngine(self)

    @property
    def track(self) -> Track | None:
        return self._track

    @property
    def has_track(self) -> bool:
        return self._track is not None

    @property
    def settings(self) -> SettingsStore | None:
        return self._settings

    @property
    def capture_enabled(self) -> bool:
        return self.capture.enabled

    def on_presence_changed(self, listener: PresenceListener) -> None:
        """Register ``listener(present)`` for track present/absent transitions."""

        self._listeners.append(listener)

    def _notify(self, present: bool) -> None:
        for listener in list(self._listeners):
            listener(present)

    def _release(self) -> bool:
        if self._track is None:
            return False
        self._track = None
        if self._display is not None:
            self._display.clear_tracks()
        return True

    def attach(self, track: Track) -> None:
        """Make ``track`` current without drawing it."""

        if track.is_empty:
            raise ContractViolation("cannot attach a track without segments")
        had_track = self._release()
        self._track = track
        if not had_track:
            self._notify(True)

    def adopt(self, track: Track) -> None:
        """Replace the current track with ``track`` and draw every segment."""

        if track.is_empty:
            raise ContractViolation("cannot adopt a track without segments")
        had_track = self._release()
        if self._display is not None:
            for seg in track.segments:
                self._display.add_track(seg.coordinates())
        self._track = track
        if not had_track:
            self._notify(True)

    def clear(self) -> None:
        """Drop the current track (no-op if there is none)."""

        if self._release():
            self._notify(False)

    def draw_extension(self, start: GeoPoint, end: GeoPoint) -> None:
        if self._display is not None:
            self._display.add_track([(start.lat_deg, start.lon_deg), (end.lat_deg, end.lon_deg)])

    def _remember_path(self, path: Path) -> None:
        if self._settings is None:
            return
        self._settings.last_track_path = path
        self._settings.flush()

    def import_track(self, path: str | Path) -> Track:
        """Load a GPX file and make it the current (dirty) track.

        On failure the exception propagates and the current track is kept.

        Raises:
            TrackIoError: The file cannot be read.
            TrackDecodeError: The file holds no usable track.
        """

        p = Path(path)
        track = read_track(p, imported=True)
        self._remember_path(p)
        self.adopt(track)
        logger.info("imported %s segments from %s", len(track.segments), p)
        return track

    def export_track(
        self,
        path: str | Path,
        *,
        confirm_overwrite: Callable[[Path], bool] | None = None,
    ) -> bool:
        """Write the current track to ``path``.

        Args:
            path: Destination file.
            confirm_overwrite: Asked when ``path`` exists; returning False
                cancels the export. None means overwrite silently.

        Returns:
            True if the file was written.

        Raises:
            ContractViolation: No track is attached.
            TrackIoError: The file cannot be written.
        """

        if self._track is None:
            raise ContractViolation("export requires a track")
        p = Path(path)
        if p.exists() and confirm_overwrite is not None and not confirm_overwrite(p):
            return False
        self._remember_path(p)
        logger.info("export to %s", p)
        write_track(self._track, p)
        return True

    def suggest_location(self, save: bool) -> DialogSeed:
        """Pre-seed a file chooser from the last used track path.

        An existing file is preselected. For a path that does not exist (the
        user just created a new document) only its folder is used, plus the
        file name when saving.
        """

        last = self._settings.last_track_path if self._settings is not None else None
        if last is None:
            return DialogSeed(folder=None, filename=None)
        if last.is_file():
            return DialogSeed(folder=last.parent, filename=last.name)
        return DialogSeed(folder=last.parent, filename=last.name if save else None)

    def set_capture(self, enabled: bool, source: FixSource | None = None) -> None:
        """Toggle capture; callers only call this on an actual state change.

        Raises:
            ContractViolation: Capture is already in the requested state, or
                no source was given when enabling.
        """

        if enabled:
            if source is None:
                raise ContractViolation("enabling capture requires a fix source")
            self.capture.enable(source)
        else:
            self.capture.disable()
