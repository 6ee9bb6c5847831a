"""Summaries of a loaded track."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from gpx_track.geo import polyline_length_m
from gpx_track.models import Track
from gpx_track.timeutils import DeltaStats, delta_stats


@dataclass(frozen=True, slots=True)
class TrackSummary:
    """High-level track inspection result."""

    segments: int
    points: int
    points_per_segment: list[int]
    timed_points: int
    start_time: datetime | None
    end_time: datetime | None
    delta: DeltaStats | None
    min_lat: float | None
    max_lat: float | None
    min_lon: float | None
    max_lon: float | None
    length_m: float
    dirty: bool


def inspect_track(track: Track) -> TrackSummary:
    """Inspect an already-loaded track.

    The length sums each segment separately; gaps between segments are not
    counted.
    """

    points = list(track.iter_points())
    if not points:
        return TrackSummary(
            segments=0,
            points=0,
            points_per_segment=[],
            timed_points=0,
            start_time=None,
            end_time=None,
            delta=None,
            min_lat=None,
            max_lat=None,
            min_lon=None,
            max_lon=None,
            length_m=0.0,
            dirty=track.dirty,
        )

    times = sorted(p.time for p in points if p.time is not None)
    lats = [p.lat_deg for p in points]
    lons = [p.lon_deg for p in points]
    return TrackSummary(
        segments=len(track.segments),
        points=len(points),
        points_per_segment=[len(s) for s in track.segments],
        timed_points=len(times),
        start_time=times[0] if times else None,
        end_time=times[-1] if times else None,
        delta=delta_stats(times),
        min_lat=min(lats),
        max_lat=max(lats),
        min_lon=min(lons),
        max_lon=max(lons),
        length_m=sum(polyline_length_m(s.coordinates()) for s in track.segments),
        dirty=track.dirty,
    )
