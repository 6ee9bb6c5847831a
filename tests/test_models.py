from __future__ import annotations

import math
from datetime import datetime

import pytest

from gpx_track.geo import haversine_m, polyline_length_m
from gpx_track.inspect import inspect_track
from gpx_track.models import GeoPoint, Segment, Track
from gpx_track.timeutils import format_gpx_time, parse_gpx_time


class TestGeoPoint:
    def test_degrees_round_trip(self) -> None:
        p = GeoPoint.from_degrees(-45.5, 170.25)

        assert p.rlat == pytest.approx(math.radians(-45.5))
        assert p.lat_deg == pytest.approx(-45.5)
        assert p.lon_deg == pytest.approx(170.25)
        assert p.altitude is None
        assert p.time is None

    @pytest.mark.parametrize(
        "rlat, rlon",
        [(math.nan, 0.0), (0.0, math.inf), (math.pi / 2 + 1e-6, 0.0), (0.0, -math.pi - 1e-6)],
    )
    def test_invalid_coordinates_rejected(self, rlat: float, rlon: float) -> None:
        with pytest.raises(ValueError):
            GeoPoint(rlat=rlat, rlon=rlon)

    def test_is_immutable(self) -> None:
        p = GeoPoint.from_degrees(1.0, 2.0)

        with pytest.raises(AttributeError):
            p.altitude = 3.0  # type: ignore[misc]


class TestTrack:
    def test_segment_must_not_be_empty(self) -> None:
        with pytest.raises(ValueError):
            Segment([])

    def test_mutators_set_dirty(self) -> None:
        track = Track()
        assert track.is_empty
        assert track.dirty is False

        track.start_segment(GeoPoint.from_degrees(1.0, 2.0))
        assert track.dirty is True
        track.mark_clean()
        track.append(GeoPoint.from_degrees(1.1, 2.1))
        assert track.dirty is True
        assert track.point_count == 2
        assert [p.lat_deg for p in track.iter_points()] == [pytest.approx(1.0), pytest.approx(1.1)]

    def test_append_needs_a_segment(self) -> None:
        with pytest.raises(ValueError):
            Track().append(GeoPoint.from_degrees(1.0, 2.0))


def test_gpx_time_formatting() -> None:
    when = datetime(2024, 12, 31, 23, 59, 58)

    assert format_gpx_time(when) == "2024-12-31T23:59:58"
    assert parse_gpx_time(" 2024-12-31T23:59:58") == when
    assert parse_gpx_time("2024-12-31 23:59:58") is None
    assert parse_gpx_time(None) is None


def test_inspect_track() -> None:
    track = Track()
    track.start_segment(GeoPoint.from_degrees(0.0, 0.0, time=datetime(2024, 1, 1, 0, 0, 0)))
    track.append(GeoPoint.from_degrees(0.0, 0.01, time=datetime(2024, 1, 1, 0, 0, 10)))
    track.start_segment(GeoPoint.from_degrees(10.0, 10.0))

    res = inspect_track(track)

    assert res.segments == 2
    assert res.points_per_segment == [2, 1]
    assert res.timed_points == 2
    assert res.delta is not None and res.delta.median_s == pytest.approx(10.0)
    assert res.max_lat == pytest.approx(10.0)
    assert res.length_m == pytest.approx(haversine_m(0.0, 0.0, 0.0, 0.01))
    assert polyline_length_m([(0.0, 0.0)]) == 0.0
