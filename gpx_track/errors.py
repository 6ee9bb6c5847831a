"""Exception types raised by track loading, saving and capture."""

from __future__ import annotations


class TrackError(Exception):
    """Base class for recoverable track errors."""


class TrackIoError(TrackError):
    """A track file could not be read or written."""


class TrackDecodeError(TrackError):
    """A document could not be turned into a usable track."""


class MalformedDocument(TrackDecodeError):
    """The XML is broken, or the gpx/trk structure is missing."""


class EmptyOrInvalidTrack(TrackDecodeError):
    """Decoding produced no usable segments."""


class ContractViolation(AssertionError):
    """A caller broke a usage contract (e.g. enabling capture twice)."""
