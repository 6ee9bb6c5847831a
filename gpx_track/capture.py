"""Live track capture from a stream of GPS fixes.

The engine is a two-state machine:

    - tracking: a last point is known; the next valid fix is appended to the
      current segment and a two-point extension is drawn.
    - idle: no last point (fresh start or after signal loss); the next valid
      fix opens a new segment and nothing is drawn.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from gpx_track.errors import ContractViolation
from gpx_track.geo import is_valid_degrees
from gpx_track.models import GeoPoint, Track
from gpx_track.timeutils import now_local, to_local_naive

if TYPE_CHECKING:
    from gpx_track.session import TrackSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Fix:
    """One position report from a location source.

    Attributes:
        valid: False means the signal was lost; coordinates are ignored.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        altitude: Altitude in meters, if reported.
        time: Time of the fix, if reported. Aware values are converted to
            local time when recorded.
    """

    valid: bool
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    time: datetime | None = None

    @classmethod
    def at(
        cls,
        latitude: float,
        longitude: float,
        altitude: float | None = None,
        time: datetime | None = None,
    ) -> Fix:
        return cls(valid=True, latitude=latitude, longitude=longitude, altitude=altitude, time=time)

    @classmethod
    def lost(cls) -> Fix:
        return cls(valid=False)


FixCallback = Callable[[Fix], None]


class FixSource:
    """Message channel between a GPS receiver and its consumers."""

    def __init__(self) -> None:
        self._subscribers: list[FixCallback] = []

    def subscribe(self, callback: FixCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: FixCallback) -> None:
        self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, fix: Fix) -> None:
        for callback in list(self._subscribers):
            callback(fix)


class CaptureEngine:
    """Appends incoming fixes to the session's track."""

    def __init__(self, session: TrackSession) -> None:
        self._session = session
        self._source: FixSource | None = None
        self._last: GeoPoint | None = None
        # track the last point belongs to; a replaced track means idle
        self._track: Track | None = None

    @property
    def enabled(self) -> bool:
        return self._source is not None

    @property
    def tracking(self) -> bool:
        return self._last is not None

    def enable(self, source: FixSource) -> None:
        """Start consuming fixes from ``source``.

        Raises:
            ContractViolation: Capture is already enabled.
        """

        if self._source is not None:
            raise ContractViolation("track capture is already enabled")
        logger.info("enabling track capture")
        source.subscribe(self.handle_fix)
        self._source = source

    def disable(self) -> None:
        """Stop consuming fixes and flush state with a synthetic signal loss.

        Raises:
            ContractViolation: Capture is not enabled.
        """

        if self._source is None:
            raise ContractViolation("track capture is already disabled")
        logger.info("disabling track capture")
        self._source.unsubscribe(self.handle_fix)
        self._source = None
        self.handle_fix(Fix.lost())

    def handle_fix(self, fix: Fix) -> None:
        if not self._is_usable(fix):
            if self._last is not None:
                logger.info("interrupting track")
            self._last = None
            self._track = None
            return

        time = to_local_naive(fix.time) if fix.time is not None else now_local()
        altitude = fix.altitude if fix.altitude is not None and math.isfinite(fix.altitude) else None
        point = GeoPoint.from_degrees(fix.latitude, fix.longitude, altitude=altitude, time=time)

        track = self._session.track
        if track is None:
            track = Track()
            track.start_segment(point)
            self._session.attach(track)
        elif self._last is None or track is not self._track:
            track.start_segment(point)
        else:
            track.append(point)
            self._session.draw_extension(self._last, point)

        self._last = point
        self._track = track

    @staticmethod
    def _is_usable(fix: Fix) -> bool:
        if not fix.valid or fix.latitude is None or fix.longitude is None:
            return False
        return is_valid_degrees(fix.latitude, fix.longitude)
