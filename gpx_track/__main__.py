"""Module entry point: python -m gpx_track ..."""

from __future__ import annotations

from gpx_track.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
