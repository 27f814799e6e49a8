"""Tests for entry extraction and staging."""
import io
import zipfile
from pathlib import Path

import pytest

from zipstage.errors import (
    ArchiveBusyError,
    DirectoryCreateFailedError,
    EntryNotFoundError,
    OpenFailedError,
    ReadTruncatedError,
    SessionClosedError,
    WriteFailedError,
)
from zipstage import extract as extract_mod
from zipstage.extract import extract_to_memory, extract_to_temp_file
from zipstage.session import ArchiveContext


def test_extract_to_memory(context, sample_zip: Path):
    with context.open(sample_zip) as session:
        assert extract_to_memory(session, "a/b.txt") == b"hello"
        assert extract_to_memory(session, "c.d64") == bytes(range(256)) * 4


def test_extract_missing_entry(context, sample_zip: Path):
    with context.open(sample_zip) as session:
        with pytest.raises(EntryNotFoundError):
            extract_to_memory(session, "missing.x")
        # session stays usable after a failed call
        assert extract_to_memory(session, "a/b.txt") == b"hello"


def test_extract_from_closed_session(context, sample_zip: Path):
    session = context.open(sample_zip)
    session.close()
    with pytest.raises(SessionClosedError):
        extract_to_memory(session, "c.d64")
    with pytest.raises(SessionClosedError):
        extract_to_temp_file(session, "c.d64")


class _ShortBackend:
    """Declares 100 bytes for every entry but only delivers 50."""

    def __init__(self, path):
        self.path = path

    def iter_names(self):
        return iter(["short.prg"])

    def entry_info(self, name):
        if name != "short.prg":
            raise KeyError(name)
        return 100, 60

    def open_entry(self, name):
        return io.BytesIO(b"x" * 50)

    def close(self):
        pass


def test_truncated_entry_fails(tmp_path: Path):
    ctx = ArchiveContext(tmp_path / "staging", backend_factory=_ShortBackend)
    with ctx.open(tmp_path / "short.zip") as session:
        with pytest.raises(ReadTruncatedError):
            extract_to_memory(session, "short.prg")
        with pytest.raises(ReadTruncatedError):
            extract_to_temp_file(session, "short.prg")
    # nothing staged for a failed extraction
    assert not (tmp_path / "staging").exists()


def test_corrupt_entry_data_fails(context, tmp_path: Path):
    path = tmp_path / "corrupt.zip"
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr("game.prg", b"A" * 4000)
    raw = bytearray(path.read_bytes())
    # flip stored bytes just after the local header so the CRC no longer matches
    offset = 30 + len("game.prg") + 2
    for i in range(offset, offset + 8):
        raw[i] ^= 0xFF
    path.write_bytes(bytes(raw))

    with context.open(path) as session:
        with pytest.raises(ReadTruncatedError):
            extract_to_memory(session, "game.prg")


def test_nested_read_is_rejected(context, sample_zip: Path):
    with context.open(sample_zip) as session:
        with session.reading():
            with pytest.raises(ArchiveBusyError):
                extract_to_memory(session, "a/b.txt")
        assert extract_to_memory(session, "a/b.txt") == b"hello"


def test_extract_to_temp_file_round_trip(context, sample_zip: Path):
    with context.open(sample_zip) as session:
        data = extract_to_memory(session, "c.d64")
        staged = extract_to_temp_file(session, "c.d64")

    assert staged.parent == context.staging_dir
    assert staged.name.startswith("temp_")
    assert staged.name.endswith("_c.d64")
    assert staged.read_bytes() == data


def test_staged_paths_are_unique(context, sample_zip: Path):
    with context.open(sample_zip) as session:
        first = extract_to_temp_file(session, "a/b.txt")
        second = extract_to_temp_file(session, "a/b.txt")

    assert first != second
    assert first.name.endswith("_b.txt") and second.name.endswith("_b.txt")
    assert first.read_bytes() == second.read_bytes() == b"hello"


def test_staging_dir_is_created_and_reused(tmp_path: Path, sample_zip: Path):
    staging = tmp_path / "deep" / "staging"
    ctx = ArchiveContext(staging)
    with ctx.open(sample_zip) as session:
        extract_to_temp_file(session, "a/b.txt")
        extract_to_temp_file(session, "c.d64")
    assert len(list(staging.iterdir())) == 2


def test_staging_dir_blocked_by_file(tmp_path: Path, sample_zip: Path):
    blocker = tmp_path / "staging"
    blocker.write_bytes(b"")
    ctx = ArchiveContext(blocker)
    with ctx.open(sample_zip) as session:
        with pytest.raises(DirectoryCreateFailedError):
            extract_to_temp_file(session, "a/b.txt")


class _ShortWriter:
    """File stand-in that keeps a single byte of every write."""

    def __init__(self, path, mode):
        self._fh = io.open(path, mode)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._fh.close()

    def write(self, data):
        return self._fh.write(data[:1])


def test_short_write_fails_and_leaves_nothing(monkeypatch, context, sample_zip: Path):
    monkeypatch.setattr(extract_mod, "open", _ShortWriter, raising=False)
    with context.open(sample_zip) as session:
        with pytest.raises(WriteFailedError):
            extract_to_temp_file(session, "c.d64")
    assert list(context.staging_dir.iterdir()) == []


def test_uncreatable_staged_file(monkeypatch, context, sample_zip: Path):
    def _refuse(path, mode):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(extract_mod, "open", _refuse, raising=False)
    with context.open(sample_zip) as session:
        with pytest.raises(WriteFailedError) as info:
            extract_to_temp_file(session, "a/b.txt")
    assert isinstance(info.value.__cause__, PermissionError)
    assert list(context.staging_dir.iterdir()) == []


class _UnsupportedBackend(_ShortBackend):
    """Entry is listed but uses a compression method nobody can decode."""

    def open_entry(self, name):
        raise NotImplementedError("That compression method is not supported")


def test_unsupported_entry_fails_to_open(tmp_path: Path):
    ctx = ArchiveContext(tmp_path / "staging", backend_factory=_UnsupportedBackend)
    with ctx.open(tmp_path / "odd.zip") as session:
        with pytest.raises(OpenFailedError) as info:
            extract_to_memory(session, "short.prg")
        assert isinstance(info.value.__cause__, NotImplementedError)
        # the read cursor is released again
        assert not session._reading


def test_encrypted_entry_fails_to_open(context, tmp_path: Path):
    path = tmp_path / "locked.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("game.prg", b"secret")
    raw = bytearray(path.read_bytes())
    # set the "encrypted" bit (bit 0 of the flags) in local and central headers
    raw[6] |= 0x01
    central = raw.rfind(b"PK\x01\x02")
    raw[central + 8] |= 0x01
    path.write_bytes(bytes(raw))

    with context.open(path) as session:
        with pytest.raises(OpenFailedError) as info:
            extract_to_memory(session, "game.prg")
    assert isinstance(info.value.__cause__, RuntimeError)
