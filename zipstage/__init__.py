"""zipstage - read-only ZIP access for tools that need a plain payload file.

This package provides:
    • ArchiveContext / ArchiveSession – open archives, index entries, track them for cleanup.
    • extract_to_memory / extract_to_temp_file – pull single entries out.
    • find_payload / extract_payload_to_temp – pick the ROM/disk image out of an archive.
    • CLI utilities under zipstage.cli (Click).
"""

__all__ = [
    "ArchiveContext",
    "ArchiveEntry",
    "ArchiveSession",
    "STAGING_DIR",
    "is_archive",
    "is_supported_extension",
    "normalize_path",
    "open_archive",
    "close_archive",
    "list_entries",
    "entry_exists",
    "cleanup_all_open_sessions",
    "extract_to_memory",
    "extract_to_temp_file",
    "find_payload",
    "extract_payload_to_temp",
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

from .errors import (  # noqa: E402
    ArchiveBusyError,
    ArchiveError,
    DirectoryCreateFailedError,
    EntryNotFoundError,
    NoPayloadError,
    NotAnArchiveError,
    OpenFailedError,
    ReadTruncatedError,
    SessionClosedError,
    WriteFailedError,
)
from .extract import extract_to_memory, extract_to_temp_file  # noqa: E402
from .names import is_archive, is_supported_extension, normalize_path  # noqa: E402
from .payload import extract_payload_to_temp, find_payload  # noqa: E402
from .session import (  # noqa: E402
    STAGING_DIR,
    ArchiveContext,
    ArchiveEntry,
    ArchiveSession,
    cleanup_all_open_sessions,
    close_archive,
    entry_exists,
    list_entries,
    open_archive,
)
