"""Local cache of extracted Godot engine binaries.

Each release lives in its own subdirectory named after its cache key, e.g.
``4.3-stable`` or ``4.3-stable-mono``. That directory holds the extracted
archive contents, including ``GodotSharp/`` for Mono builds on Windows.
"""

from __future__ import annotations

import os
import shutil
import stat
import sys
from os import PathLike
from pathlib import Path

from ggg.archive import ArchiveError, extract_zip, scan_zip
from ggg.release import GodotRelease


class GodotCache:
    """Manages the on-disk cache of extracted Godot engine binaries."""

    def __init__(self, base: str | PathLike[str]) -> None:
        self.base = Path(base)

    def contains(self, release: GodotRelease) -> bool:
        """Whether the release is extracted here; an empty directory does not count."""
        directory = self.release_dir(release)
        if not directory.is_dir():
            return False
        try:
            return any(directory.iterdir())
        except OSError:
            return False

    def executable_path(self, release: GodotRelease) -> Path:
        """Path to the Godot executable of an installed release."""
        return find_executable(self.release_dir(release))

    def install(self, release: GodotRelease, archive: str | PathLike[str]) -> Path:
        """Extract ``archive`` into the cache and return the executable path.

        Any previous contents of the release's directory are removed first.
        """
        release.validate()
        directory = self.release_dir(release)

        if directory.exists():
            _remove_tree(directory)
        directory.mkdir(parents=True, exist_ok=True)

        try:
            scan_zip(archive)
        except ArchiveError as exc:
            raise ArchiveError(
                f"Godot archive contains unsafe paths - refusing to extract: {exc}"
            ) from exc
        extract_zip(archive, directory)

        executable = find_executable(directory)
        if os.name == "posix":
            _set_executable_bit(executable)
        return executable

    def remove(self, release: GodotRelease) -> None:
        """Remove a cached release; does nothing if it is not cached."""
        release.validate()
        directory = self.release_dir(release)
        if directory.exists():
            _remove_tree(directory)

    def release_dir(self, release: GodotRelease) -> Path:
        """The directory holding a release's extracted files."""
        return self.base / release.cache_key()


def find_executable(directory: str | PathLike[str]) -> Path:
    """Find the Godot executable inside an extracted release directory.

    On macOS the binary inside a ``.app`` bundle is preferred. Otherwise the
    directory is searched two levels deep, and the non-console variant is
    chosen when there are several candidates.
    """
    directory = Path(directory)
    if sys.platform == "darwin":
        app_exe = _find_macos_app_executable(directory)
        if app_exe is not None:
            return app_exe

    candidates = _collect_executables(directory, 2)
    if not candidates:
        raise FileNotFoundError(f"no Godot executable found in {directory}")
    if len(candidates) == 1:
        return candidates[0]
    for candidate in candidates:
        if not is_console_executable(candidate):
            return candidate
    raise FileNotFoundError("could not find a non-console Godot executable")


def is_godot_executable(path: str | PathLike[str]) -> bool:
    """Whether the file name looks like a Godot executable on Windows or Linux."""
    name = Path(path).name.lower()
    return name.startswith("godot") and (name.endswith(".exe") or "linux" in name)


def is_console_executable(path: str | PathLike[str]) -> bool:
    """Whether this is the Windows console-window variant of the executable."""
    return "console" in Path(path).name.lower()


def _find_macos_app_executable(directory: Path) -> Path | None:
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return None
    for entry in entries:
        if entry.is_dir() and entry.suffix == ".app":
            exe = entry / "Contents" / "MacOS" / "Godot"
            if exe.is_file():
                return exe
    return None


def _collect_executables(directory: Path, depth: int) -> list[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    found: list[Path] = []
    for entry in entries:
        if entry.is_file() and is_godot_executable(entry):
            found.append(entry)
        elif entry.is_dir() and depth > 1:
            found.extend(_collect_executables(entry, depth - 1))
    return found


def _set_executable_bit(path: Path) -> None:
    mode = stat.S_IMODE(path.stat().st_mode)
    os.chmod(path, mode | 0o755)


def _remove_tree(directory: Path) -> None:
    # Extracted files are read-only, which blocks deletion on some platforms.
    for root, _dirs, files in os.walk(directory):
        for name in files:
            file_path = Path(root) / name
            try:
                os.chmod(file_path, stat.S_IMODE(file_path.lstat().st_mode) | stat.S_IWUSR)
            except OSError:
                pass
    shutil.rmtree(directory)