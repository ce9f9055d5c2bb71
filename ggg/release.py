"""Identifiers for a specific Godot build: version numbers and releases.

Both types parse from and render as canonical strings::

    "4.3"             -> GodotVersion(4, 3, 0)
    "4.3.1"           -> GodotVersion(4, 3, 1)
    "4.3-stable"      -> GodotRelease(GodotVersion(4, 3, 0), "stable", mono=False)
    "4.3-stable-mono" -> GodotRelease(GodotVersion(4, 3, 0), "stable", mono=True)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_COMPONENT_RE = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1
_MONO_SUFFIX = "-mono"


def _parse_component(part: str, label: str, text: str) -> int:
    if not _COMPONENT_RE.fullmatch(part):
        raise ValueError(f'invalid {label} component in Godot version "{text}"')
    value = int(part)
    if value > _U32_MAX:
        raise ValueError(f'invalid {label} component in Godot version "{text}"')
    return value


@dataclass(frozen=True, order=True)
class GodotVersion:
    """A Godot version number, compared by major, then minor, then patch.

    The patch component defaults to 0, so "4.3" and "4.3.0" are equal.
    """

    major: int
    minor: int
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> GodotVersion:
        """Parse ``MAJOR.MINOR`` or ``MAJOR.MINOR.PATCH``."""
        parts = text.split(".")
        if len(parts) == 2:
            major, minor = parts
            return cls(
                _parse_component(major, "major", text),
                _parse_component(minor, "minor", text),
                0,
            )
        if len(parts) == 3:
            major, minor, patch = parts
            return cls(
                _parse_component(major, "major", text),
                _parse_component(minor, "minor", text),
                _parse_component(patch, "patch", text),
            )
        raise ValueError(
            f'invalid Godot version "{text}": expected MAJOR.MINOR or MAJOR.MINOR.PATCH'
        )

    def __str__(self) -> str:
        """Render the version, omitting a zero patch component."""
        if self.patch == 0:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class GodotRelease:
    """A downloadable Godot build: version, flavor and standard vs. Mono."""

    version: GodotVersion
    flavor: str
    mono: bool = False

    @classmethod
    def parse(cls, text: str) -> GodotRelease:
        """Parse ``VERSION-FLAVOR`` or ``VERSION-FLAVOR-mono``."""
        if text.endswith(_MONO_SUFFIX):
            base, mono = text[: -len(_MONO_SUFFIX)], True
        else:
            base, mono = text, False
        version_str, sep, flavor = base.partition("-")
        if not sep:
            raise ValueError(f'invalid Godot release "{text}": expected VERSION-FLAVOR')
        try:
            version = GodotVersion.parse(version_str)
        except ValueError as exc:
            raise ValueError(f'invalid version in Godot release "{text}": {exc}') from exc
        return cls(version, flavor, mono)

    def tag(self) -> str:
        """The release tag, e.g. ``4.3-stable``; the Mono flag is not part of it."""
        return f"{self.version}-{self.flavor}"

    def cache_key(self) -> str:
        """A filesystem-safe identifier used as the cache directory name."""
        if self.mono:
            return f"{self.version}-{self.flavor}-mono"
        return self.tag()

    def is_stable(self) -> bool:
        """Whether this is a stable release."""
        return self.flavor == "stable"

    def validate(self) -> GodotRelease:
        """Check that the flavor is safe to use as a path component."""
        validate_path_component("flavor", self.flavor)
        return self

    def __str__(self) -> str:
        return self.cache_key()


def validate_path_component(field: str, value: str) -> None:
    """Raise ValueError unless ``value`` holds only alphanumerics, '.' and '-'."""
    if not value:
        raise ValueError(f"GodotRelease {field} must not be empty")
    if not all(c.isalnum() or c in ".-" for c in value):
        raise ValueError(f'GodotRelease {field} contains invalid characters: "{value}"')