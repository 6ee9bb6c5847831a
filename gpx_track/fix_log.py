"""CSV fix logs used to replay a GPS session through the capture engine."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from gpx_track.capture import Fix
from gpx_track.settings import parse_bool
from gpx_track.timeutils import parse_gpx_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FixLogSummary:
    """Quick summary of fix log parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_float(value: str) -> float:
    return float(value.strip())


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return _parse_float(value)


def load_fixes(csv_path: str | Path) -> tuple[list[Fix], FixLogSummary]:
    """Load a fix log into memory.

    Columns:
        - status: 1/true for a valid fix, 0/false for signal lost
        - latitude/longitude: decimal degrees (ignored when status is 0)
        - altitude (optional): meters
        - time (optional): YYYY-MM-DDTHH:MM:SS local time

    Args:
        csv_path: Path to the CSV.

    Returns:
        (fixes, summary)
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[Fix] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        for row in reader:
            rows_total += 1
            try:
                if not parse_bool(row["status"]):
                    parsed.append(Fix.lost())
                    continue
                parsed.append(
                    Fix.at(
                        latitude=_parse_float(row["latitude"]),
                        longitude=_parse_float(row["longitude"]),
                        altitude=_parse_optional_float(row.get("altitude")),
                        time=parse_gpx_time(row.get("time")),
                    )
                )
            except (KeyError, ValueError, TypeError, AttributeError):
                continue

    summary = FixLogSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("定位记录中有 %s 行解析失败已跳过", summary.rows_skipped)
    return parsed, summary
