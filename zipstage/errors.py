"""Exceptions raised by zipstage operations."""
from __future__ import annotations

__all__ = [
    "ArchiveError",
    "NotAnArchiveError",
    "OpenFailedError",
    "EntryNotFoundError",
    "ReadTruncatedError",
    "WriteFailedError",
    "DirectoryCreateFailedError",
    "NoPayloadError",
    "SessionClosedError",
    "ArchiveBusyError",
]


class ArchiveError(RuntimeError):
    """Base class for every failure surfaced by zipstage."""


class NotAnArchiveError(ArchiveError):
    pass


class OpenFailedError(ArchiveError):
    """The archive (or one of its entries) could not be opened."""


class EntryNotFoundError(ArchiveError):
    pass


class ReadTruncatedError(ArchiveError):
    """Fewer bytes came out of an entry than its header declares."""


class WriteFailedError(ArchiveError):
    pass


class DirectoryCreateFailedError(ArchiveError):
    pass


class NoPayloadError(ArchiveError):
    pass


class SessionClosedError(ArchiveError):
    pass


class ArchiveBusyError(ArchiveError):
    """Another entry read is already in progress on the same session."""
