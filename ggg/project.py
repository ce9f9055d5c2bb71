"""Reading the Godot version and Mono flag from a ``project.godot`` file.

The relevant line lives in the ``[application]`` section::

    config/features=PackedStringArray("4.3", "C#", "Forward Plus")

The first element is the version series; ``"C#"`` marks a Mono project.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from ggg.release import GodotVersion

_FEATURES_PREFIX = "config/features=PackedStringArray("


@dataclass(frozen=True)
class ProjectInfo:
    """Metadata extracted from a ``project.godot`` file."""

    version: GodotVersion
    mono: bool


def read_project_info(path: str | PathLike[str]) -> ProjectInfo | None:
    """Read a ``project.godot`` file; None if it has no usable features line."""
    content = Path(path).read_text(encoding="utf-8")
    return parse_project_info(content)


def _lines(content: str):
    for line in content.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def parse_project_info(content: str) -> ProjectInfo | None:
    """Parse ``project.godot`` text into a ProjectInfo, or None."""
    line = next((l for l in _lines(content) if l.startswith(_FEATURES_PREFIX)), None)
    if line is None:
        return None
    inner = line[len(_FEATURES_PREFIX):]
    if not inner.endswith(")"):
        return None
    inner = inner[:-1]

    items = [item.strip().strip('"') for item in inner.split(",")]
    try:
        version = GodotVersion.parse(items[0])
    except ValueError:
        return None
    return ProjectInfo(version=version, mono="C#" in items)