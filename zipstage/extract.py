"""
Pull single entries out of an open archive.

Two flavours:

* :func:`extract_to_memory` returns the entry's bytes.
* :func:`extract_to_temp_file` writes them below the context's staging
  directory and returns the path, for consumers that only accept a file.

Staged files belong to the caller; :meth:`ArchiveContext.purge_staging`
removes them in bulk.
"""
from __future__ import annotations

import itertools
import logging
import zipfile
import zlib
from pathlib import Path

from .errors import (
    DirectoryCreateFailedError,
    EntryNotFoundError,
    OpenFailedError,
    ReadTruncatedError,
    WriteFailedError,
)
from .names import staged_file_name
from .session import ArchiveSession

__all__ = ["extract_to_memory", "extract_to_temp_file", "staged_name"]

logger = logging.getLogger(__name__)

# shared by every context, never reset while the process lives
_temp_counter = itertools.count(1)


def staged_name(entry_name: str) -> str:
    """Next unique file name for staging *entry_name*."""
    return staged_file_name(next(_temp_counter), entry_name)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("cannot remove partial file %s", path, exc_info=True)


def extract_to_memory(session: ArchiveSession, name: str) -> bytes:
    """Return the full uncompressed contents of entry *name*."""
    with session.reading() as backend:
        try:
            size, _ = backend.entry_info(name)
        except KeyError:
            raise EntryNotFoundError(f"{name!r} not found in {session.path}") from None
        except (zipfile.BadZipFile, ValueError, OSError) as exc:
            raise OpenFailedError(f"cannot locate {name!r} in {session.path}: {exc}") from exc

        try:
            src = backend.open_entry(name)
        except KeyError:
            raise EntryNotFoundError(f"{name!r} not found in {session.path}") from None
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError, ValueError, OSError) as exc:
            # unsupported compression, encryption, damaged local header
            raise OpenFailedError(f"cannot open {name!r} in {session.path}: {exc}") from exc

        with src:
            try:
                data = src.read(size)
            except (zipfile.BadZipFile, EOFError, zlib.error, OSError) as exc:
                raise ReadTruncatedError(f"{name!r} in {session.path} is corrupt: {exc}") from exc

    if len(data) != size:
        raise ReadTruncatedError(
            f"{name!r} in {session.path}: read {len(data)} of {size} bytes"
        )
    logger.debug("extracted %s!%s (%d bytes)", session.path, name, size)
    return data


def extract_to_temp_file(session: ArchiveSession, name: str) -> Path:
    """Stage entry *name* as a file and return its path."""
    data = extract_to_memory(session, name)

    staging_dir = session.context.staging_dir
    try:
        staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateFailedError(f"cannot create {staging_dir}: {exc}") from exc

    target = staging_dir / staged_name(name)
    try:
        with open(target, "wb") as fh:
            written = fh.write(data)
    except OSError as exc:
        _discard(target)
        raise WriteFailedError(f"cannot write {target}: {exc}") from exc
    if written != len(data):
        _discard(target)
        raise WriteFailedError(f"{target}: wrote {written} of {len(data)} bytes")

    logger.debug("staged %s!%s as %s", session.path, name, target)
    return target
