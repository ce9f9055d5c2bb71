"""Client for the Godot Asset Library HTTP API.

The API returns some numeric fields (``asset_id``, ``version``) as JSON
strings, and ``download_hash`` may be an empty string when no hash was
provided. Only the current version of each asset is available.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

import requests

API_BASE = "https://godotengine.org/asset-library/api"

_TIMEOUT = 30
_U32_MAX = 2**32 - 1
_U32_RE = re.compile(r"\+?[0-9]+")


class AssetLibError(RuntimeError):
    """The asset library could not be reached or returned unusable data."""


def _str_field(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _string_u32(data: Mapping[str, Any], key: str) -> int:
    text = _str_field(data, key)
    if not _U32_RE.fullmatch(text) or int(text) > _U32_MAX:
        raise ValueError(f"field `{key}` is not a valid number: {text!r}")
    return int(text)


def _number_u32(data: Mapping[str, Any], key: str) -> int:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ValueError(f"field `{key}` must be an unsigned 32-bit integer")
    return value


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    return data


@dataclass(frozen=True)
class AssetSearchResult:
    """One entry in a search result page."""

    asset_id: int
    title: str
    author: str
    license: str

    @classmethod
    def from_json(cls, data: Any) -> AssetSearchResult:
        """Build from decoded JSON; raises ValueError on malformed data."""
        data = _require_mapping(data)
        return cls(
            asset_id=_string_u32(data, "asset_id"),
            title=_str_field(data, "title"),
            author=_str_field(data, "author"),
            license=_str_field(data, "cost"),
        )


@dataclass(frozen=True)
class AssetDetail:
    """Full detail for a single asset."""

    asset_id: int
    title: str
    author: str
    license: str
    version: int
    version_string: str
    download_url: str
    download_hash: str | None
    browse_url: str

    @classmethod
    def from_json(cls, data: Any) -> AssetDetail:
        """Build from decoded JSON; raises ValueError on malformed data."""
        data = _require_mapping(data)
        download_hash = _str_field(data, "download_hash")
        return cls(
            asset_id=_string_u32(data, "asset_id"),
            title=_str_field(data, "title"),
            author=_str_field(data, "author"),
            license=_str_field(data, "cost"),
            version=_string_u32(data, "version"),
            version_string=_str_field(data, "version_string"),
            download_url=_str_field(data, "download_url"),
            download_hash=download_hash or None,
            browse_url=_str_field(data, "browse_url"),
        )


def _get(url: str, params: list[tuple[str, str]] | None, error_note: str) -> Any:
    try:
        response = requests.get(url, params=params, timeout=_TIMEOUT)
    except requests.RequestException as exc:
        raise AssetLibError(f"failed to reach asset library API at {url}: {exc}") from exc
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise AssetLibError(f"{error_note}: {exc}") from exc
    return response


def search(query: str, godot_version: str) -> tuple[list[AssetSearchResult], int]:
    """Search for ``query`` among assets compatible with ``godot_version``.

    Returns the results and the total count, which may exceed the number of
    results when there are several pages.
    """
    url = f"{API_BASE}/asset"
    params = [
        ("filter", query),
        ("support", "official+community"),
        ("sort", "updated"),
    ]
    if godot_version:
        params.append(("godot_version", godot_version))
    response = _get(url, params, "asset library API returned an error")
    try:
        body = _require_mapping(response.json())
        total = _number_u32(body, "total_items")
        if "result" not in body:
            raise ValueError("missing field `result`")
        raw_results = body["result"]
        if not isinstance(raw_results, list):
            raise ValueError("field `result` must be a list")
        results = [AssetSearchResult.from_json(item) for item in raw_results]
    except ValueError as exc:
        raise AssetLibError(
            f"failed to parse asset library search response: {exc}"
        ) from exc
    return results, total


def get_asset(asset_id: int) -> AssetDetail:
    """Fetch full details for the asset with the given id."""
    url = f"{API_BASE}/asset/{asset_id}"
    response = _get(
        url, None, f"asset library returned an error for asset id {asset_id}"
    )
    try:
        return AssetDetail.from_json(response.json())
    except ValueError as exc:
        raise AssetLibError(
            f"failed to parse asset library detail response: {exc}"
        ) from exc