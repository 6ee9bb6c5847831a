"""Command-line interface for gpx_track.

Run:
    python -m gpx_track inspect --gpx track.gpx
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from gpx_track.capture import FixSource
from gpx_track.errors import TrackError
from gpx_track.fix_log import load_fixes
from gpx_track.gpx_io import read_track, write_track
from gpx_track.inspect import inspect_track
from gpx_track.persistence import PersistenceController
from gpx_track.session import TrackSession
from gpx_track.settings import SettingsStore, StorageConfig


def _cmd_inspect(args: argparse.Namespace) -> int:
    track = read_track(args.gpx)
    res = inspect_track(track)

    print("### 轨迹段")
    print(f"segments={res.segments}, points={res.points}")
    print("points_per_segment=" + ", ".join(str(n) for n in res.points_per_segment))
    print()

    if res.start_time is not None and res.end_time is not None:
        print("### 时间范围（本地时间）")
        print(f"start={res.start_time.isoformat(sep=' ')}, end={res.end_time.isoformat(sep=' ')}")
        print(f"timed_points={res.timed_points}")
        print()

    if res.delta is not None:
        print("### 采样间隔（秒）")
        print(
            f"count={res.delta.count}, min={res.delta.min_s:.3f}, median={res.delta.median_s:.3f}, "
            f"p95={res.delta.p95_s:.3f}, max={res.delta.max_s:.3f}"
        )
        print()

    print("### 经纬度范围")
    print(f"lat=[{res.min_lat}, {res.max_lat}], lon=[{res.min_lon}, {res.max_lon}]")
    print()

    print("### 轨迹长度（米，不含段间空隙）")
    print(f"{res.length_m:.1f}")
    print()

    if args.json:
        import json

        print(json.dumps(asdict(res), ensure_ascii=False, indent=2, default=str))
    return 0


def _cmd_normalize(args: argparse.Namespace) -> int:
    track = read_track(args.gpx)
    write_track(track, args.out)
    print(f"segments={len(track.segments)}, points={track.point_count}")
    print(f"已导出：{args.out}")
    return 0


def _cmd_replay(args: argparse.Namespace) -> int:
    config = StorageConfig(data_dir=Path(args.data_dir).expanduser()) if args.data_dir else StorageConfig.from_env()
    settings = SettingsStore(config.settings_file)
    session = TrackSession(settings=settings)
    controller = PersistenceController.from_config(session, settings, config)
    source = FixSource()

    controller.restore(source)
    if not session.capture_enabled:
        session.set_capture(True, source)

    fixes, summary = load_fixes(args.fixes)
    for fix in fixes:
        source.publish(fix)

    if not args.keep_capture:
        session.set_capture(False)

    written = controller.save()
    track = session.track
    print(f"rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    if track is None:
        print("没有记录到任何轨迹点")
    else:
        print(f"segments={len(track.segments)}, points={track.point_count}")
    print(f"{'已保存' if written else '无需保存'}：{controller.track_file}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="gpx_track")
    p.add_argument("-v", "--verbose", action="count", default=0, help="输出更多日志（-vv 为调试级别）")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="分析 GPX 轨迹的分段/时间范围/采样间隔等")
    p_ins.add_argument("--gpx", type=str, required=True, help="输入GPX路径")
    p_ins.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_ins.set_defaults(func=_cmd_inspect)

    p_norm = sub.add_parser("normalize", help="读取 GPX 并按本工具格式重新写出（坏点处分段）")
    p_norm.add_argument("--gpx", type=str, required=True, help="输入GPX路径")
    p_norm.add_argument("--out", type=str, required=True, help="输出GPX路径")
    p_norm.set_defaults(func=_cmd_normalize)

    p_rep = sub.add_parser("replay", help="把定位记录CSV回放进轨迹记录，并保存到数据目录")
    p_rep.add_argument("--fixes", type=str, required=True, help="定位记录CSV（status,latitude,longitude[,altitude][,time]）")
    p_rep.add_argument("--data-dir", type=str, default=None, help="数据目录，默认 $GPX_TRACK_HOME 或 ~/.gpx_track")
    p_rep.add_argument("--keep-capture", action="store_true", help="结束后保持记录开启状态（下次启动自动恢复）")
    p_rep.set_defaults(func=_cmd_replay)

    return p


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return int(args.func(args))
    except (TrackError, OSError) as exc:
        print(f"错误：{exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
