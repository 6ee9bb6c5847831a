from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from gpx_track.settings import SettingsStore

GPX_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


def gpx_doc(body: str, *, root: str = "gpx") -> bytes:
    """Wrap ``body`` in a GPX 1.0 root element."""

    return (
        GPX_HEADER
        + f'<{root} creator="test" xmlns="http://www.topografix.com/GPX/1/0">\n{body}\n</{root}>\n'
    ).encode("utf-8")


def trkpt(lat: str | None, lon: str | None, ele: str | None = None, time: str | None = None) -> str:
    attrs = ""
    if lat is not None:
        attrs += f' lat="{lat}"'
    if lon is not None:
        attrs += f' lon="{lon}"'
    children = ""
    if ele is not None:
        children += f"<ele>{ele}</ele>"
    if time is not None:
        children += f"<time>{time}</time>"
    return f"<trkpt{attrs}>{children}</trkpt>"


class RecordingDisplay:
    """Display collaborator that remembers what it was asked to draw."""

    def __init__(self) -> None:
        self.lines: list[list[tuple[float, float]]] = []
        self.clears = 0

    def add_track(self, coords: Sequence[tuple[float, float]]) -> None:
        self.lines.append(list(coords))

    def clear_tracks(self) -> None:
        self.lines.clear()
        self.clears += 1


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def settings(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "data" / "settings.json")


@pytest.fixture
def two_segment_gpx() -> bytes:
    return gpx_doc(
        "<trk><name>walk</name>"
        "<trkseg>"
        + trkpt("52.5000000", "13.4000000", ele="34.50", time="2024-05-01T10:00:00")
        + trkpt("52.5001000", "13.4001000", ele="35.00", time="2024-05-01T10:00:05")
        + "</trkseg><trkseg>"
        + trkpt("52.5100000", "13.4100000", time="2024-05-01T11:00:00")
        + "</trkseg></trk>"
    )
