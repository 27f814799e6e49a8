"""
Pick the payload file out of an archive.

A payload is the first non-directory entry, in archive order, whose extension
is on an allowlist.  Typical input::

    readme.txt
    docs/
    game.d64      <- payload with the default list
    game.crt
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from .errors import NoPayloadError
from .extract import extract_to_temp_file
from .names import extension_list, is_supported_extension
from .session import ArchiveContext, ArchiveSession, default_context

__all__ = ["find_payload", "extract_payload_to_temp"]

logger = logging.getLogger(__name__)


def find_payload(session: ArchiveSession, allowed_extensions: Optional[Iterable[str] | str] = None) -> str:
    """Return the name of the first entry matching *allowed_extensions*.

    Falls back to :data:`~zipstage.names.DEFAULT_PAYLOAD_EXTENSIONS` when no
    list is given.  A single extension may be passed as a plain string.
    """
    allowed = extension_list(allowed_extensions)
    for entry in session.entries:
        if entry.is_directory:
            continue
        if is_supported_extension(entry.name, allowed):
            return entry.name
    raise NoPayloadError(f"no payload file found in {session.path}")


def extract_payload_to_temp(
    zip_path: Path | str,
    allowed_extensions: Optional[Iterable[str] | str] = None,
    context: ArchiveContext | None = None,
) -> Path:
    """Open *zip_path*, stage its payload and close it again."""
    with (context or default_context).open(zip_path) as session:
        name = find_payload(session, allowed_extensions)
        logger.debug("payload of %s is %s", zip_path, name)
        return extract_to_temp_file(session, name)
