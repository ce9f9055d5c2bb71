"""High-level operations on Godot engine binaries.

:func:`ensure` makes sure a release is in the cache, downloading it when
needed; :func:`launch` runs an executable with the terminal's streams.
"""

from __future__ import annotations

import subprocess
from os import PathLike
from pathlib import Path
from typing import Sequence

from ggg.cache import GodotCache
from ggg.download import DownloadError, download_release
from ggg.release import GodotRelease


def ensure(release: GodotRelease, cache: GodotCache) -> Path:
    """Return the executable for ``release``, downloading and installing it if absent."""
    if cache.contains(release):
        return cache.executable_path(release)

    tag = release.tag()
    try:
        archive = download_release(release)
    except DownloadError as exc:
        raise DownloadError(f"failed to download Godot {tag}: {exc}") from exc

    try:
        executable = cache.install(release, archive)
    except Exception as exc:
        raise RuntimeError(f"failed to install Godot {tag}: {exc}") from exc
    finally:
        try:
            Path(archive).unlink(missing_ok=True)
        except OSError:
            pass

    return executable


def launch(executable: str | PathLike[str], args: Sequence[str]) -> int:
    """Run ``executable`` with ``args``, inheriting stdio; return its exit code."""
    try:
        completed = subprocess.run([str(executable), *args], check=False)
    except OSError as exc:
        raise RuntimeError(f"failed to launch Godot at {executable}: {exc}") from exc
    return completed.returncode