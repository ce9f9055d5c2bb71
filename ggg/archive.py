"""Scanning and extracting zip and tar.gz archives safely.

Archives go through two phases:

1. Scan (:func:`scan_zip` / :func:`scan_tar_gz`): every entry path is checked
   and the whole archive is rejected if any one is unsafe. Nothing is written.
2. Extract (:func:`extract_zip` / :func:`extract_tar_gz`): files are written
   below the destination, ``__MACOSX`` junk is skipped in zips, and every
   extracted file is made read-only.
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
import zipfile
from os import PathLike
from pathlib import Path, PurePath
from typing import BinaryIO

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


class ArchiveError(Exception):
    """An archive could not be read, or holds an unsafe path."""


def check_path(path_str: str) -> None:
    """Raise ArchiveError if ``path_str`` is absolute or contains ``..``."""
    if path_str.startswith(("/", "\\")):
        raise ArchiveError(f"absolute path in archive: {path_str!r}")
    pure = PurePath(path_str)
    if pure.drive or pure.root:
        raise ArchiveError(f"absolute path prefix in archive: {path_str!r}")
    if ".." in pure.parts:
        raise ArchiveError(f"path traversal in archive: {path_str!r}")


def _open_zip(archive_path: str | PathLike[str]) -> zipfile.ZipFile:
    path = Path(archive_path)
    try:
        return zipfile.ZipFile(path)
    except OSError as exc:
        raise ArchiveError(f"failed to open archive {path}: {exc}") from exc
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"failed to read zip archive: {exc}") from exc


def _open_tar_gz(archive_path: str | PathLike[str]) -> tarfile.TarFile:
    path = Path(archive_path)
    try:
        return tarfile.open(path, "r:gz")
    except (tarfile.TarError, EOFError) as exc:
        raise ArchiveError(f"failed to read tar entries: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"failed to open archive {path}: {exc}") from exc


def scan_zip(archive_path: str | PathLike[str]) -> None:
    """Reject the zip archive if any entry has an unsafe path."""
    with _open_zip(archive_path) as archive:
        for index, info in enumerate(archive.infolist()):
            try:
                check_path(info.filename)
            except ArchiveError as exc:
                raise ArchiveError(f"unsafe path in zip entry {index}: {exc}") from exc


def scan_tar_gz(archive_path: str | PathLike[str]) -> None:
    """Reject the tar.gz archive if any entry has an unsafe path."""
    with _open_tar_gz(archive_path) as archive:
        try:
            for index, member in enumerate(archive):
                try:
                    check_path(member.name)
                except ArchiveError as exc:
                    raise ArchiveError(
                        f"unsafe path in tar entry {index}: {exc}"
                    ) from exc
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise ArchiveError(f"failed to read tar entries: {exc}") from exc


def extract_zip(archive_path: str | PathLike[str], dest_dir: str | PathLike[str]) -> None:
    """Extract a zip archive into ``dest_dir``, skipping ``__MACOSX`` entries."""
    dest = Path(dest_dir)
    with _open_zip(archive_path) as archive:
        for info in archive.infolist():
            if "__MACOSX" in info.filename or info.is_dir() or not info.filename:
                continue
            try:
                with archive.open(info) as reader:
                    _write_entry(info.filename, reader, dest)
            except (OSError, zipfile.BadZipFile) as exc:
                raise ArchiveError(f"failed to extract {info.filename}: {exc}") from exc


def extract_tar_gz(
    archive_path: str | PathLike[str], dest_dir: str | PathLike[str]
) -> None:
    """Extract a tar.gz archive into ``dest_dir``, skipping directory entries."""
    dest = Path(dest_dir)
    with _open_tar_gz(archive_path) as archive:
        try:
            for member in archive:
                if member.isdir() or not member.name:
                    continue
                reader = archive.extractfile(member) if member.isreg() else None
                try:
                    if reader is None:
                        _write_bytes(member.name, b"", dest)
                    else:
                        with reader:
                            _write_entry(member.name, reader, dest)
                except OSError as exc:
                    raise ArchiveError(f"failed to extract {member.name}: {exc}") from exc
        except (tarfile.TarError, EOFError) as exc:
            raise ArchiveError(f"failed to read tar entries: {exc}") from exc


def _write_entry(rel: str, reader: BinaryIO, dest_dir: Path) -> None:
    dest_path = dest_dir / rel
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    with open(dest_path, "wb") as out:
        shutil.copyfileobj(reader, out)
    _make_readonly(dest_path)


def _write_bytes(rel: str, data: bytes, dest_dir: Path) -> None:
    dest_path = dest_dir / rel
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    dest_path.write_bytes(data)
    _make_readonly(dest_path)


def _make_readonly(path: Path) -> None:
    mode = path.stat().st_mode
    os.chmod(path, stat.S_IMODE(mode) & ~_WRITE_BITS)