"""Data models for recorded tracks: points, segments and the track itself."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Iterator

from gpx_track.geo import deg2rad, rad2deg

PRODUCT_NAME: Final[str] = "gpx-track"
VERSION: Final[str] = "0.1.0"
GPX_NAMESPACE: Final[str] = "http://www.topografix.com/GPX/1/0"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A single recorded position.

    Attributes:
        rlat: Latitude in radians, within [-pi/2, pi/2].
        rlon: Longitude in radians, within [-pi, pi].
        altitude: Altitude in meters, or None if the source had none.
        time: Naive local wall-clock timestamp, or None.
    """

    rlat: float
    rlon: float
    altitude: float | None = None
    time: datetime | None = None

    def __post_init__(self) -> None:
        if not (math.isfinite(self.rlat) and math.isfinite(self.rlon)):
            raise ValueError(f"坐标必须是有限值：rlat={self.rlat!r}, rlon={self.rlon!r}")
        if abs(self.rlat) > math.pi / 2 or abs(self.rlon) > math.pi:
            raise ValueError(f"坐标超出范围：rlat={self.rlat!r}, rlon={self.rlon!r}")

    @classmethod
    def from_degrees(
        cls,
        lat: float,
        lon: float,
        altitude: float | None = None,
        time: datetime | None = None,
    ) -> GeoPoint:
        """Build a point from decimal degrees."""

        return cls(rlat=deg2rad(lat), rlon=deg2rad(lon), altitude=altitude, time=time)

    @property
    def lat_deg(self) -> float:
        return rad2deg(self.rlat)

    @property
    def lon_deg(self) -> float:
        return rad2deg(self.rlon)


@dataclass(slots=True)
class Segment:
    """One uninterrupted run of points, in recording order.

    A segment always holds at least one point.
    """

    points: list[GeoPoint]

    def __post_init__(self) -> None:
        if not self.points:
            raise ValueError("Segment 至少需要一个点")

    def __len__(self) -> int:
        return len(self.points)

    def append(self, point: GeoPoint) -> None:
        self.points.append(point)

    @property
    def last(self) -> GeoPoint:
        return self.points[-1]

    def coordinates(self) -> list[tuple[float, float]]:
        """Return (lat, lon) pairs in degrees, for rendering."""

        return [(p.lat_deg, p.lon_deg) for p in self.points]


@dataclass(slots=True)
class Track:
    """An ordered collection of segments plus a dirty flag.

    Note:
        ``dirty`` means the in-memory content is not reflected in persisted
        storage yet. Mutators set it; a successful write clears it.
    """

    segments: list[Segment] = field(default_factory=list)
    dirty: bool = False

    def start_segment(self, point: GeoPoint) -> Segment:
        """Open a new segment holding ``point`` and return it."""

        seg = Segment([point])
        self.segments.append(seg)
        self.dirty = True
        return seg

    def append(self, point: GeoPoint) -> None:
        """Append ``point`` to the last segment."""

        if not self.segments:
            raise ValueError("Track 没有可追加的 Segment")
        self.segments[-1].append(point)
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def point_count(self) -> int:
        return sum(len(s) for s in self.segments)

    def iter_points(self) -> Iterator[GeoPoint]:
        for seg in self.segments:
            yield from seg.points
