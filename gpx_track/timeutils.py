"""Time parsing and formatting utilities for GPX timestamps."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Iterable

GPX_TIME_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S"

_GPX_TIME_RE = re.compile(r"\s*(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})")


def parse_gpx_time(text: str | None) -> datetime | None:
    """Parse a GPX ``<time>`` value into a naive local datetime.

    Only the leading ``YYYY-MM-DDTHH:MM:SS`` part is read; anything after the
    seconds field (a ``Z`` suffix, fractional seconds, an offset) is ignored
    and the value is taken as local wall-clock time.

    Args:
        text: Element text, may be None.

    Returns:
        Naive datetime, or None if the text does not match or names an
        impossible calendar date.
    """

    if not text:
        return None
    m = _GPX_TIME_RE.match(text)
    if m is None:
        return None
    try:
        return datetime(*(int(g) for g in m.groups()))
    except ValueError:
        return None


def to_local_naive(dt: datetime) -> datetime:
    """Drop tzinfo after converting an aware datetime to local time."""

    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def format_gpx_time(dt: datetime) -> str:
    """Format a datetime as local ``YYYY-MM-DDTHH:MM:SS``."""

    return to_local_naive(dt).strftime(GPX_TIME_FORMAT)


def now_local() -> datetime:
    """Current local time, truncated to whole seconds."""

    return datetime.now().replace(microsecond=0)


@dataclass(frozen=True, slots=True)
class DeltaStats:
    """Sampling interval stats (seconds)."""

    count: int
    min_s: float
    median_s: float
    p95_s: float
    max_s: float


def delta_stats(times_sorted: Iterable[datetime]) -> DeltaStats | None:
    """Compute basic sampling-interval statistics.

    Args:
        times_sorted: Timestamps sorted ascending.

    Returns:
        DeltaStats or None if less than 2 points.
    """

    ts = list(times_sorted)
    if len(ts) < 2:
        return None
    deltas = [(ts[i] - ts[i - 1]).total_seconds() for i in range(1, len(ts)) if ts[i] >= ts[i - 1]]
    if not deltas:
        return None
    deltas.sort()
    n = len(deltas)
    median = deltas[n // 2] if n % 2 == 1 else 0.5 * (deltas[n // 2 - 1] + deltas[n // 2])
    p95 = deltas[int(0.95 * (n - 1))]
    return DeltaStats(
        count=n,
        min_s=deltas[0],
        median_s=median,
        p95_s=p95,
        max_s=deltas[-1],
    )
