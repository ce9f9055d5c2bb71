"""Fetching and parsing the Godot versions manifest.

The manifest lists release series newest-first. Each entry names the latest
build of its series (``flavor``) and optionally older pre-release builds
(``releases``).
"""

from __future__ import annotations

from typing import Any

import requests
import yaml

from ggg.release import GodotRelease, GodotVersion

VERSIONS_MANIFEST_URL = (
    "https://raw.githubusercontent.com/godotengine/godot-website/master/_data/versions.yml"
)

_TIMEOUT = 30


def fetch_versions() -> list[GodotRelease]:
    """Download and parse the manifest, returning releases newest-first."""
    try:
        response = requests.get(VERSIONS_MANIFEST_URL, timeout=_TIMEOUT)
        text = response.text
    except requests.RequestException as exc:
        raise RuntimeError(f"failed to fetch Godot versions manifest: {exc}") from exc
    return parse_versions(text)


def _require_str(mapping: dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str):
        raise ValueError(
            f"failed to parse Godot versions manifest: field {key!r} must be a string"
        )
    return value


def parse_versions(yaml_text: str) -> list[GodotRelease]:
    """Parse manifest YAML into releases, skipping unrecognised version names."""
    try:
        entries = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse Godot versions manifest: {exc}") from exc
    if not isinstance(entries, list):
        raise ValueError("failed to parse Godot versions manifest: expected a list")

    releases: list[GodotRelease] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(
                "failed to parse Godot versions manifest: entries must be mappings"
            )
        name = _require_str(entry, "name")
        flavor = _require_str(entry, "flavor")
        older = entry.get("releases", [])
        if not isinstance(older, list) or not all(isinstance(r, dict) for r in older):
            raise ValueError(
                "failed to parse Godot versions manifest: 'releases' must be a list of mappings"
            )
        older_flavors = [_require_str(r, "name") for r in older]

        try:
            version = GodotVersion.parse(name)
        except ValueError:
            continue

        releases.append(GodotRelease(version, flavor, False))
        releases.extend(GodotRelease(version, f, False) for f in older_flavors)

    return releases