"""Downloading Godot release archives from the godot-builds GitHub releases.

Downloading has two steps: query the releases API for the tag's asset list
and pick the asset for the current platform, then stream that asset to a
temporary file. Extracting it is left to :class:`ggg.cache.GodotCache`.
"""

from __future__ import annotations

import os
import platform as _platform_mod
import sys
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

import requests
from tqdm import tqdm

from ggg.release import GodotRelease

GODOT_BUILDS_API = "https://api.github.com/repos/godotengine/godot-builds/releases/tags"

_USER_AGENT = "ggg"
_CHUNK_SIZE = 8192
_TIMEOUT = 60


class DownloadError(RuntimeError):
    """A release could not be located or downloaded."""


class Platform(Enum):
    """The platform used to choose an asset from a release."""

    LINUX_X86_64 = "LinuxX86_64"
    MACOS = "MacOs"
    WINDOWS_X86_64 = "WindowsX86_64"

    @classmethod
    def current(cls) -> Platform:
        """Detect the platform this process runs on."""
        machine = _platform_mod.machine().lower()
        is_x86_64 = machine in ("x86_64", "amd64")
        if sys.platform.startswith("linux") and is_x86_64:
            return cls.LINUX_X86_64
        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform == "win32" and is_x86_64:
            return cls.WINDOWS_X86_64
        raise DownloadError(
            "unsupported platform - ggg supports Linux x86_64, macOS, and Windows x86_64"
        )

    def asset_suffixes(self) -> tuple[str, ...]:
        """Asset name suffixes for this platform, most preferred first.

        Several suffixes cover naming changes across Godot versions.
        """
        if self is Platform.LINUX_X86_64:
            return ("_linux.x86_64.zip", "_x11.64.zip", "_linux.64.zip")
        if self is Platform.MACOS:
            return ("_macos.universal.zip", "_osx.universal.zip", "_osx.fat.zip")
        # Standard builds end in _win64.exe.zip, Mono builds in _win64.zip.
        return ("_win64.exe.zip", "_win64.zip")


@dataclass(frozen=True)
class Asset:
    """One downloadable file attached to a GitHub release."""

    name: str
    browser_download_url: str


def select_asset(
    assets: Iterable[Asset], release: GodotRelease, platform: Platform
) -> str:
    """Return the download URL of the asset matching ``release`` on ``platform``."""
    assets = list(assets)
    if release.mono:
        prefix = f"Godot_v{release.version}-{release.flavor}_mono_"
    else:
        prefix = f"Godot_v{release.version}-{release.flavor}_"

    for suffix in platform.asset_suffixes():
        expected = prefix + suffix.lstrip("_")
        match = next((a for a in assets if a.name == expected), None)
        if match is not None:
            return match.browser_download_url

    raise DownloadError(
        f"no suitable asset found for {release.version} {release.flavor} "
        f"(mono: {str(release.mono).lower()}) on {platform.value}"
    )


def fetch_asset_url(release: GodotRelease, platform: Platform) -> str:
    """Query the releases API for the asset URL of ``release`` on ``platform``."""
    tag = release.tag()
    url = f"{GODOT_BUILDS_API}/{tag}"
    try:
        response = requests.get(
            url,
            headers={
                "User-Agent": _USER_AGENT,
                "Accept": "application/vnd.github.v3+json",
            },
            timeout=_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise DownloadError(
            f"failed to query GitHub releases API for {tag}: {exc}"
        ) from exc

    if not response.ok:
        raise DownloadError(
            f"GitHub releases API returned {response.status_code} {response.reason} "
            f"for tag {tag}"
        )

    try:
        data = response.json()
        assets = [
            Asset(name=str(item["name"]), browser_download_url=str(item["browser_download_url"]))
            for item in data["assets"]
        ]
    except (ValueError, KeyError, TypeError) as exc:
        raise DownloadError(
            f"failed to parse GitHub releases API response: {exc}"
        ) from exc

    return select_asset(assets, release, platform)


def download_release(release: GodotRelease) -> Path:
    """Download the archive for ``release`` on this platform to a temporary file.

    The caller is responsible for removing the returned file.
    """
    release.validate()
    url = fetch_asset_url(release, Platform.current())
    return _download_archive(url, release)


def _download_archive(url: str, release: GodotRelease) -> Path:
    tag = release.tag()
    try:
        response = requests.get(
            url, headers={"User-Agent": _USER_AGENT}, stream=True, timeout=_TIMEOUT
        )
    except requests.RequestException as exc:
        raise DownloadError(f"failed to start download from {url}: {exc}") from exc

    with response:
        if not response.ok:
            raise DownloadError(
                f"download failed with status {response.status_code} {response.reason}"
            )

        length = response.headers.get("Content-Length")
        total = int(length) if length and length.isdigit() else None

        fd, name = tempfile.mkstemp(suffix=".zip")
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as out, tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                desc=f"Downloading Godot {tag}",
            ) as progress:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if not chunk:
                        continue
                    out.write(chunk)
                    progress.update(len(chunk))
                progress.set_description(f"Downloaded Godot {tag}")
        except requests.RequestException as exc:
            path.unlink(missing_ok=True)
            raise DownloadError(f"error reading download stream: {exc}") from exc
        except BaseException:
            path.unlink(missing_ok=True)
            raise

    return path