from __future__ import annotations

from pathlib import Path

import pytest

from conftest import gpx_doc, trkpt
from gpx_track.cli import main
from gpx_track.gpx_io import read_track
from gpx_track.settings import SettingsStore


def test_inspect(tmp_path: Path, two_segment_gpx: bytes, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "walk.gpx"
    src.write_bytes(two_segment_gpx)

    assert main(["inspect", "--gpx", str(src), "--json"]) == 0

    out = capsys.readouterr().out
    assert "segments=2, points=3" in out
    assert '"points_per_segment"' in out


def test_inspect_reports_decode_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "empty.gpx"
    src.write_bytes(gpx_doc("<trk/>"))

    assert main(["inspect", "--gpx", str(src)]) == 1
    assert "错误" in capsys.readouterr().err


def test_normalize_splits_at_bad_points(tmp_path: Path) -> None:
    src = tmp_path / "in.gpx"
    src.write_bytes(
        gpx_doc("<trk><trkseg>" + trkpt("1.0", "2.0") + trkpt(None, "2.0") + trkpt("3.0", "4.0") + "</trkseg></trk>")
    )
    out = tmp_path / "out.gpx"

    assert main(["normalize", "--gpx", str(src), "--out", str(out)]) == 0

    assert [len(s) for s in read_track(out).segments] == [1, 1]


def test_replay_saves_track_and_capture_flag(tmp_path: Path) -> None:
    fixes = tmp_path / "fixes.csv"
    fixes.write_text(
        "status,latitude,longitude,altitude,time\n"
        "1,52.5,13.4,30,2024-05-01T10:00:00\n"
        "1,52.5001,13.4001,,2024-05-01T10:00:05\n"
        "0,,,,\n"
        "1,not-a-number,13.4,,\n"
        "1,52.6,13.5,,2024-05-01T10:10:00\n",
        encoding="utf-8",
    )
    data_dir = tmp_path / "state"

    assert main(["replay", "--fixes", str(fixes), "--data-dir", str(data_dir), "--keep-capture"]) == 0

    track = read_track(data_dir / "track.trk", imported=False)
    assert [len(s) for s in track.segments] == [2, 1]
    assert SettingsStore(data_dir / "settings.json").capture_enabled is True

    assert main(["replay", "--fixes", str(fixes), "--data-dir", str(data_dir)]) == 0

    track = read_track(data_dir / "track.trk", imported=False)
    assert [len(s) for s in track.segments] == [2, 1, 2, 1]
    assert SettingsStore(data_dir / "settings.json").capture_enabled is False
