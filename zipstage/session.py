"""
Open archives and the registry that tracks them.

An :class:`ArchiveContext` is the registry: every session opened through it
stays listed until closed, so a shutdown path can tear all of them down with
:meth:`ArchiveContext.cleanup_all_open_sessions`.  The module keeps one
default context for callers that do not need their own.

Example::

    ctx = ArchiveContext()
    with ctx.open("games.zip") as session:
        for entry in session.entries:
            print(entry.name, entry.uncompressed_size)
"""
from __future__ import annotations

import contextlib
import logging
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Tuple

from .backend import ZipBackend
from .errors import ArchiveBusyError, NotAnArchiveError, OpenFailedError, SessionClosedError
from .names import is_archive, is_staged_name

__all__ = [
    "STAGING_DIR",
    "ArchiveEntry",
    "ArchiveSession",
    "ArchiveContext",
    "default_context",
    "open_archive",
    "close_archive",
    "list_entries",
    "entry_exists",
    "cleanup_all_open_sessions",
]

logger = logging.getLogger(__name__)

STAGING_DIR = Path(tempfile.gettempdir()) / "zipstage"


@dataclass(frozen=True)
class ArchiveEntry:
    """One item of the archive's central directory."""

    name: str
    uncompressed_size: int
    compressed_size: int

    @property
    def is_directory(self) -> bool:
        return self.name.endswith("/")


class ArchiveSession:
    """A single open archive with its entry index.

    Created by :meth:`ArchiveContext.open`; do not instantiate directly.
    """

    def __init__(self, context: "ArchiveContext", path: Path, backend) -> None:
        self.context = context
        self.path = path
        self._backend = backend
        self._reading = False
        self.is_open = True
        self._entries: Tuple[ArchiveEntry, ...] = self._index()

    def _index(self) -> Tuple[ArchiveEntry, ...]:
        # a broken entry is dropped so the rest of the archive stays usable
        entries = []
        for name in self._backend.iter_names():
            try:
                size, csize = self._backend.entry_info(name)
            except (zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
                logger.warning("%s: skipping unreadable entry %r (%s)", self.path, name, exc)
                continue
            entries.append(ArchiveEntry(name, size, csize))
        return tuple(entries)

    def __repr__(self) -> str:  # pragma: no cover
        state = "open" if self.is_open else "closed"
        return f"<ArchiveSession {self.path} {state} entries={len(self._entries)}>"

    def __enter__(self) -> "ArchiveSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        # truthy even when empty or closed
        return True

    def _check_open(self) -> None:
        if not self.is_open:
            raise SessionClosedError(f"archive session for {self.path} is closed")

    @property
    def backend(self):
        self._check_open()
        return self._backend

    @contextlib.contextmanager
    def reading(self) -> Iterator[object]:
        """Hold the session's single read cursor and yield the backend."""
        backend = self.backend
        if self._reading:
            raise ArchiveBusyError(f"{self.path}: another entry is being read")
        self._reading = True
        try:
            yield backend
        finally:
            self._reading = False

    @property
    def entries(self) -> Tuple[ArchiveEntry, ...]:
        self._check_open()
        return self._entries

    def get_entry(self, name: str) -> Optional[ArchiveEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def entry_exists(self, name: str) -> bool:
        """Exact, case-sensitive lookup among file entries; False once closed."""
        if not self.is_open:
            return False
        return any(e.name == name and not e.is_directory for e in self._entries)

    def close(self) -> None:
        """Release the archive. Safe to call any number of times."""
        if not self.is_open:
            return
        self.is_open = False
        backend, self._backend = self._backend, None
        try:
            backend.close()
        except Exception:  # noqa: BLE001 - close must never raise
            logger.warning("%s: error while closing archive", self.path, exc_info=True)
        self.context._forget(self)
        logger.debug("closed %s", self.path)


class ArchiveContext:
    """Registry of open archive sessions plus staging configuration.

    Parameters
    ----------
    staging_dir: str | Path
        Directory that receives staged temp files.
    backend_factory: callable
        Builds the archive backend from a path; defaults to :class:`ZipBackend`.
    """

    def __init__(
        self,
        staging_dir: Path | str = STAGING_DIR,
        *,
        backend_factory: Callable[[Path], object] = ZipBackend,
    ) -> None:
        self.staging_dir = Path(staging_dir)
        self.backend_factory = backend_factory
        self._sessions: Dict[int, ArchiveSession] = {}

    @property
    def open_sessions(self) -> Tuple[ArchiveSession, ...]:
        return tuple(self._sessions.values())

    def open(self, path: Path | str) -> ArchiveSession:
        """Open *path* and index its entries."""
        if not is_archive(path):
            raise NotAnArchiveError(f"not a zip archive: {path}")
        path = Path(path)
        try:
            backend = self.backend_factory(path)
        except (zipfile.BadZipFile, OSError, NotImplementedError, ValueError) as exc:
            raise OpenFailedError(f"cannot open {path}: {exc}") from exc

        try:
            session = ArchiveSession(self, path, backend)
        except (zipfile.BadZipFile, OSError) as exc:
            backend.close()
            raise OpenFailedError(f"cannot read entries of {path}: {exc}") from exc
        except Exception:
            backend.close()
            raise
        self._sessions[id(session)] = session
        logger.debug("opened %s (%d entries)", path, len(session))
        return session

    def _forget(self, session: ArchiveSession) -> None:
        self._sessions.pop(id(session), None)

    def cleanup_all_open_sessions(self, *, purge_staged: bool = False) -> int:
        """Close every tracked session; return how many were closed."""
        sessions = list(self._sessions.values())
        for session in sessions:
            session.close()
        self._sessions.clear()
        if sessions:
            logger.info("closed %d open archive(s)", len(sessions))
        if purge_staged:
            self.purge_staging()
        return len(sessions)

    def purge_staging(self) -> int:
        """Delete the files this library staged, leaving anything else alone."""
        if not self.staging_dir.is_dir():
            return 0
        removed = 0
        for child in self.staging_dir.iterdir():
            if child.is_symlink() or not child.is_file() or not is_staged_name(child.name):
                continue
            child.unlink(missing_ok=True)
            removed += 1
        logger.debug("purged %d staged file(s) from %s", removed, self.staging_dir)
        return removed


default_context = ArchiveContext()


# module-level API bound to the default context

def open_archive(path: Path | str, context: ArchiveContext | None = None) -> ArchiveSession:
    return (context or default_context).open(path)


def close_archive(session: ArchiveSession | None) -> None:
    if session is not None:
        session.close()


def list_entries(session: ArchiveSession) -> Tuple[ArchiveEntry, ...]:
    return session.entries


def entry_exists(session: ArchiveSession | None, name: str) -> bool:
    return session is not None and session.entry_exists(name)


def cleanup_all_open_sessions(context: ArchiveContext | None = None, *, purge_staged: bool = False) -> int:
    return (context or default_context).cleanup_all_open_sessions(purge_staged=purge_staged)
