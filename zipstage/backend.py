"""
Thin adapter around :mod:`zipfile` used by archive sessions.

Sessions never touch ``zipfile`` directly; they talk to an object with the
small surface below.  Tests swap in their own backend through
``ArchiveContext(backend_factory=...)``.
"""
from __future__ import annotations

import zipfile
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Tuple

__all__ = ["ZipBackend"]

# fixed part of a local file header
_LOCAL_HEADER_SIZE = 30


class ZipBackend:
    """Read-only view over one ZIP file.

    Raises ``zipfile.BadZipFile`` or ``OSError`` from the constructor when the
    file cannot be opened as an archive.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._size = self.path.stat().st_size
        self._zf = zipfile.ZipFile(self.path)
        self._infos: Dict[str, zipfile.ZipInfo] = {}
        for info in self._zf.infolist():
            # first occurrence wins for duplicated names
            self._infos.setdefault(info.filename, info)

    def iter_names(self) -> Iterator[str]:
        for info in self._zf.infolist():
            yield info.filename

    def entry_info(self, name: str) -> Tuple[int, int]:
        """Return ``(uncompressed_size, compressed_size)`` for *name*."""
        info = self._infos[name]
        if info.header_offset + _LOCAL_HEADER_SIZE > self._size:
            raise zipfile.BadZipFile(f"local header of {name!r} lies outside the archive")
        if info.compress_size > self._size:
            raise zipfile.BadZipFile(f"compressed size of {name!r} exceeds the archive")
        return info.file_size, info.compress_size

    def open_entry(self, name: str) -> BinaryIO:
        """Open *name* for streaming read; ``KeyError`` if it is not present."""
        return self._zf.open(self._infos[name])

    def close(self) -> None:
        self._zf.close()
