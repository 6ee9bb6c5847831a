from __future__ import annotations

import argparse
import random
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from gpx_track.models import GPX_NAMESPACE, PRODUCT_NAME, VERSION
from gpx_track.timeutils import format_gpx_time


@dataclass(frozen=True, slots=True)
class Start:
    name: str
    lat: float
    lon: float


def _add_point(seg: ET.Element, lat: float, lon: float, altitude: float, when: datetime) -> None:
    pt = ET.SubElement(seg, "trkpt", {"lat": f"{lat:.7f}", "lon": f"{lon:.7f}"})
    ET.SubElement(pt, "ele").text = f"{altitude:.2f}"
    ET.SubElement(pt, "time").text = format_gpx_time(when)


def _add_bad_point(seg: ET.Element, rng: random.Random, lat: float, lon: float) -> None:
    """A trkpt the decoder must reject (missing or garbage coordinate)."""

    kind = rng.choice(["no_lat", "no_lon", "garbage"])
    if kind == "no_lat":
        ET.SubElement(seg, "trkpt", {"lon": f"{lon:.7f}"})
    elif kind == "no_lon":
        ET.SubElement(seg, "trkpt", {"lat": f"{lat:.7f}"})
    else:
        ET.SubElement(seg, "trkpt", {"lat": "n/a", "lon": f"{lon:.7f}"})


def generate_gpx(
    *,
    segments: int,
    points: int,
    bad_rate: float,
    seed: int,
    start_local: datetime,
    start: Start,
) -> ET.Element:
    """Build a fake walk with ``segments`` trkseg of ``points`` trkpt each."""

    rng = random.Random(seed)
    root = ET.Element("gpx", {"creator": f"{PRODUCT_NAME} v{VERSION}", "xmlns": GPX_NAMESPACE})
    trk = ET.SubElement(root, "trk")

    lat, lon = start.lat, start.lon
    altitude = rng.uniform(0, 600)
    cur = start_local
    for _ in range(segments):
        seg = ET.SubElement(trk, "trkseg")
        for _ in range(points):
            # Mostly small steps, random walk
            lat += rng.uniform(-0.0003, 0.0003)
            lon += rng.uniform(-0.0003, 0.0003)
            altitude = max(0.0, altitude + rng.uniform(-2.0, 2.0))
            cur = cur + timedelta(seconds=rng.randint(1, 10))
            if rng.random() < bad_rate:
                _add_bad_point(seg, rng, lat, lon)
            else:
                _add_point(seg, lat, lon, altitude, cur)
        # Pause between recordings
        cur = cur + timedelta(minutes=rng.uniform(5, 60))

    ET.indent(root, space="  ")
    return root


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake GPX track for demo/testing (privacy-safe).")
    p.add_argument("--out", type=str, default="sample_data/track.gpx", help="Output GPX path")
    p.add_argument("--segments", type=int, default=3, help="Number of trkseg elements")
    p.add_argument("--points", type=int, default=200, help="Points per trkseg")
    p.add_argument("--bad-rate", type=float, default=0.0, help="Share of malformed trkpt (0..1)")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument(
        "--start",
        type=str,
        default="2025-01-01 08:00:00",
        help="Start local time, e.g. '2025-01-01 08:00:00'",
    )
    args = p.parse_args()

    root = generate_gpx(
        segments=args.segments,
        points=args.points,
        bad_rate=args.bad_rate,
        seed=args.seed,
        start_local=datetime.fromisoformat(args.start),
        start=Start("shanghai_lab", 31.2304000, 121.4737000),
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    ET.ElementTree(root).write(out_path, encoding="UTF-8", xml_declaration=True)

    print(f"Generated: {out_path} (segments={args.segments}, points={args.points}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
