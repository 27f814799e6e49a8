"""Name helpers for archive entries and host paths.

Everything here is pure string handling: nothing touches the filesystem.
Entry names inside a ZIP always use ``/`` as separator, host paths passed in
by users may not, hence :func:`normalize_path`.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

__all__ = [
    "DEFAULT_PAYLOAD_EXTENSIONS",
    "extension",
    "has_extension",
    "normalize_path",
    "base_name",
    "sanitize_base_name",
    "is_archive",
    "is_supported_extension",
    "extension_list",
    "staged_file_name",
    "is_staged_name",
]

# disk, tape, program and cartridge images for the Commodore machines
DEFAULT_PAYLOAD_EXTENSIONS = (
    ".prg", ".p00", ".t64", ".tap", ".d64", ".d71", ".d81",
    ".x64", ".g64", ".crt", ".bin", ".rom",
)

_UNSAFE_RE = re.compile(r'[\x00-\x1f:*?"<>|\\/]')
_STAGED_RE = re.compile(r"temp_\d+_.")


def extension(name: str) -> str:
    """Return the lower-cased suffix of the last segment of *name* (``""`` if none)."""
    last = name.replace("\\", "/").rsplit("/", 1)[-1]
    dot = last.rfind(".")
    if dot < 0:
        return ""
    return last[dot:].lower()


def _dotted(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith(".") else f".{ext}"


def has_extension(name: str, ext: str) -> bool:
    return extension(name) == _dotted(ext)


def normalize_path(path: str) -> str:
    """Turn a host-style path into ZIP entry form.

    >>> normalize_path("\\\\games\\\\disk1.d64")
    'games/disk1.d64'
    """
    normalized = path.replace("\\", "/")
    if normalized.startswith("/"):
        normalized = normalized[1:]
    return normalized


def base_name(name: str) -> str:
    return normalize_path(name).rsplit("/", 1)[-1]


def sanitize_base_name(name: str) -> str:
    """Last path segment of *name*, safe to use as a host file name."""
    base = _UNSAFE_RE.sub("_", base_name(name))
    if base in ("", ".", ".."):
        return "entry"
    return base


def is_archive(path) -> bool:
    return has_extension(str(path), ".zip")


def extension_list(allowed: Optional[Iterable[str] | str] = None) -> tuple[str, ...]:
    """Normalise an allowlist; a bare string counts as a single extension."""
    if allowed is None:
        return DEFAULT_PAYLOAD_EXTENSIONS
    if isinstance(allowed, str):
        allowed = (allowed,)
    return tuple(_dotted(ext) for ext in allowed)


def is_supported_extension(name: str, allowed: Optional[Iterable[str] | str] = None) -> bool:
    """True if *name* ends with one of *allowed* (default: the payload list)."""
    ext = extension(name)
    if not ext:
        return False
    return ext in extension_list(allowed)


def staged_file_name(counter: int, entry_name: str) -> str:
    return f"temp_{counter}_{sanitize_base_name(entry_name)}"


def is_staged_name(file_name: str) -> bool:
    """True for names produced by :func:`staged_file_name`."""
    return _STAGED_RE.match(file_name) is not None
