"""GPX input/output: decode documents into a Track and encode it back.

Only the subset needed for a recorded track is modeled::

    gpx / trk / trkseg / trkpt[@lat, @lon] / (ele, time)

Unknown elements are skipped with a diagnostic, never fatal.
"""

from __future__ import annotations

import contextlib
import logging
import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from gpx_track.errors import EmptyOrInvalidTrack, MalformedDocument, TrackIoError
from gpx_track.geo import is_valid_degrees
from gpx_track.models import GPX_NAMESPACE, PRODUCT_NAME, VERSION, GeoPoint, Segment, Track
from gpx_track.timeutils import format_gpx_time, parse_gpx_time

logger = logging.getLogger(__name__)


def _local_name(tag: object) -> str:
    """Tag name without namespace, lower-cased; '' for comments/PIs."""

    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_float(value: str | None) -> float | None:
    """Parse a plain decimal like "-12.5" or "1e3"; None otherwise."""

    if value is None:
        return None
    s = value.strip()
    if not _DECIMAL_RE.fullmatch(s):
        return None
    return float(s)


def _parse_trkpt(el: ET.Element) -> GeoPoint | None:
    """Parse one trkpt; None means the point is rejected."""

    lat = _parse_float(el.get("lat"))
    lon = _parse_float(el.get("lon"))
    if lat is None or lon is None or not is_valid_degrees(lat, lon):
        return None

    altitude: float | None = None
    time = None
    for child in el:
        name = _local_name(child.tag)
        if name == "ele":
            altitude = _parse_float(child.text)
            if altitude is not None and not math.isfinite(altitude):
                altitude = None
            if altitude is None:
                logger.debug("ignoring unparsable <ele>%s</ele>", child.text)
        elif name == "time":
            time = parse_gpx_time(child.text)
            if time is None:
                logger.debug("ignoring unparsable <time>%s</time>", child.text)

    return GeoPoint.from_degrees(lat, lon, altitude=altitude, time=time)


def _parse_trkseg(el: ET.Element, segments: list[Segment]) -> int:
    """Append the segments found in one trkseg; return the rejected count."""

    current: Segment | None = None
    rejected = 0
    for child in el:
        name = _local_name(child.tag)
        if name != "trkpt":
            if name:
                logger.debug("found unhandled gpx/trk/trkseg/%s", name)
            continue

        point = _parse_trkpt(child)
        if point is None:
            rejected += 1
            # 坏点：结束当前段，下一个有效点开新段
            if current is not None:
                logger.info("ending track segment at rejected point")
                current = None
            continue

        if current is None:
            current = Segment([point])
            segments.append(current)
        else:
            current.append(point)
    return rejected


def _parse_trk(el: ET.Element) -> list[Segment]:
    segments: list[Segment] = []
    rejected = 0
    for child in el:
        name = _local_name(child.tag)
        if name == "trkseg":
            rejected += _parse_trkseg(child, segments)
        elif name:
            logger.debug("found unhandled gpx/trk/%s", name)
    if rejected > 0:
        logger.warning("GPX中有 %s 个轨迹点解析失败已跳过", rejected)
    return segments


def _parse_gpx(el: ET.Element) -> list[Segment] | None:
    """Return segments of the first trk, or None if there is no trk."""

    segments: list[Segment] | None = None
    for child in el:
        name = _local_name(child.tag)
        if name == "trk":
            if segments is None:
                segments = _parse_trk(child)
            else:
                logger.warning("ignoring additional track")
        elif name:
            logger.debug("found unhandled gpx/%s", name)
    return segments


def decode(data: bytes, *, imported: bool = True) -> Track:
    """Decode a GPX document into a Track.

    Args:
        data: Raw document bytes.
        imported: True for documents coming from outside (the track is marked
            dirty); False when restoring our own persisted file.

    Returns:
        A Track with at least one segment.

    Raises:
        MalformedDocument: XML errors, or no gpx root / no trk element.
        EmptyOrInvalidTrack: no usable points.
    """

    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedDocument(f"XML解析失败：{exc}") from exc

    name = _local_name(root.tag)
    if name != "gpx":
        logger.info("found unhandled %s", name)
        raise MalformedDocument(f"根元素不是 gpx：<{name}>")

    segments = _parse_gpx(root)
    if segments is None:
        raise MalformedDocument("gpx 中没有 trk 元素")
    if not segments:
        raise EmptyOrInvalidTrack("track was empty/invalid track")

    return Track(segments=segments, dirty=imported)


def read_track(path: str | Path, *, imported: bool = True) -> Track:
    """Read and decode a GPX file.

    Raises:
        TrackIoError: The file cannot be read.
        TrackDecodeError: See :func:`decode`.
    """

    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise TrackIoError(f"无法读取轨迹文件：{p}") from exc
    return decode(data, imported=imported)


def _format_coord(value: float) -> str:
    return f"{value:.7f}"


def encode(track: Track) -> bytes:
    """Serialize a Track to GPX bytes (UTF-8, with XML declaration).

    Does not touch ``track.dirty``; see :func:`write_track`.
    """

    root = ET.Element(
        "gpx",
        {"creator": f"{PRODUCT_NAME} v{VERSION}", "xmlns": GPX_NAMESPACE},
    )
    trk = ET.SubElement(root, "trk")
    for seg in track.segments:
        node_seg = ET.SubElement(trk, "trkseg")
        for pt in seg.points:
            node_pt = ET.SubElement(
                node_seg,
                "trkpt",
                {"lat": _format_coord(pt.lat_deg), "lon": _format_coord(pt.lon_deg)},
            )
            if pt.altitude is not None:
                ET.SubElement(node_pt, "ele").text = f"{pt.altitude:.2f}"
            if pt.time is not None:
                ET.SubElement(node_pt, "time").text = format_gpx_time(pt.time)

    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True) + b"\n"


def write_track(track: Track, path: str | Path) -> None:
    """Write a Track to ``path`` and clear its dirty flag.

    The document goes to a sibling temp file first and then replaces the
    destination, so an existing file is never left truncated.

    Raises:
        TrackIoError: The file cannot be written. The track stays dirty.
    """

    p = Path(path)
    data = encode(track)
    tmp = p.with_name(p.name + ".tmp")
    try:
        tmp.write_bytes(data)
        tmp.replace(p)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise TrackIoError(f"无法写入轨迹文件：{p}") from exc

    track.mark_clean()
    logger.info("track written to %s (%s segments, %s points)", p, len(track.segments), track.point_count)
