"""Identify, download, cache and launch Godot engine builds, and query the Asset Library."""

__version__ = "0.1.0"