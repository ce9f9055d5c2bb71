import io
import zipfile
from unittest import mock

import pytest

from ggg.download import (
    GODOT_BUILDS_API,
    Asset,
    DownloadError,
    Platform,
    download_release,
    fetch_asset_url,
    select_asset,
)
from ggg.release import GodotRelease, GodotVersion


def release(version, flavor, mono):
    return GodotRelease(GodotVersion.parse(version), flavor, mono)


def make_assets(names):
    return [Asset(name=n, browser_download_url=f"https://example.com/{n}") for n in names]


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, body=b"", reason="OK", headers=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.reason = reason
        self._json = json_data
        self._body = body
        self.headers = headers if headers is not None else {}

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start:start + chunk_size]

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def test_select_asset_picks_correct_linux_asset():
    assets = make_assets([
        "Godot_v4.3-stable_linux.x86_64.zip",
        "Godot_v4.3-stable_win64.exe.zip",
        "Godot_v4.3-stable_macos.universal.zip",
    ])
    url = select_asset(assets, release("4.3", "stable", False), Platform.LINUX_X86_64)
    assert "linux.x86_64" in url


def test_select_asset_picks_mono_asset_when_requested():
    assets = make_assets([
        "Godot_v4.3-stable_linux.x86_64.zip",
        "Godot_v4.3-stable_mono_linux.x86_64.zip",
    ])
    url = select_asset(assets, release("4.3", "stable", True), Platform.LINUX_X86_64)
    assert "mono" in url


def test_select_asset_does_not_pick_mono_for_standard_release():
    assets = make_assets([
        "Godot_v4.3-stable_linux.x86_64.zip",
        "Godot_v4.3-stable_mono_linux.x86_64.zip",
    ])
    url = select_asset(assets, release("4.3", "stable", False), Platform.LINUX_X86_64)
    assert "mono" not in url


def test_select_asset_falls_back_to_legacy_suffix():
    assets = make_assets(["Godot_v3.5-stable_x11.64.zip"])
    url = select_asset(assets, release("3.5", "stable", False), Platform.LINUX_X86_64)
    assert "x11.64" in url


def test_select_asset_picks_mono_windows_asset():
    assets = make_assets([
        "Godot_v4.6-stable_win64.exe.zip",
        "Godot_v4.6-stable_mono_win64.zip",
    ])
    url = select_asset(assets, release("4.6", "stable", True), Platform.WINDOWS_X86_64)
    assert "mono" in url
    assert "win64.zip" in url


def test_select_asset_picks_standard_windows_asset():
    assets = make_assets([
        "Godot_v4.6-stable_win64.exe.zip",
        "Godot_v4.6-stable_mono_win64.zip",
    ])
    url = select_asset(assets, release("4.6", "stable", False), Platform.WINDOWS_X86_64)
    assert "mono" not in url
    assert "win64.exe.zip" in url


def test_select_asset_returns_error_when_no_match():
    assets = make_assets(["Godot_v4.3-stable_win64.exe.zip"])
    with pytest.raises(DownloadError, match="no suitable asset"):
        select_asset(assets, release("4.3", "stable", False), Platform.LINUX_X86_64)


def test_select_asset_picks_macos_asset():
    assets = make_assets([
        "Godot_v4.3-stable_linux.x86_64.zip",
        "Godot_v4.3-stable_macos.universal.zip",
    ])
    url = select_asset(assets, release("4.3", "stable", False), Platform.MACOS)
    assert url == "https://example.com/Godot_v4.3-stable_macos.universal.zip"


def test_asset_suffixes_prefer_current_naming_first():
    assert Platform.LINUX_X86_64.asset_suffixes()[0] == "_linux.x86_64.zip"
    assert Platform.WINDOWS_X86_64.asset_suffixes() == ("_win64.exe.zip", "_win64.zip")
    assert "_osx.fat.zip" in Platform.MACOS.asset_suffixes()


@pytest.mark.parametrize(
    "sys_platform, machine, expected",
    [
        ("linux", "x86_64", Platform.LINUX_X86_64),
        ("darwin", "arm64", Platform.MACOS),
        ("win32", "AMD64", Platform.WINDOWS_X86_64),
    ],
)
def test_platform_current_detects_supported(sys_platform, machine, expected):
    with mock.patch("sys.platform", sys_platform), mock.patch(
        "platform.machine", return_value=machine
    ):
        assert Platform.current() is expected


def test_platform_current_rejects_unsupported():
    with mock.patch("sys.platform", "linux"), mock.patch(
        "platform.machine", return_value="aarch64"
    ):
        with pytest.raises(DownloadError, match="unsupported platform"):
            Platform.current()


def test_fetch_asset_url_queries_tag_and_selects():
    data = {"assets": [
        {"name": "Godot_v4.3-stable_linux.x86_64.zip",
         "browser_download_url": "https://example.com/linux.zip"},
        {"name": "Godot_v4.3-stable_win64.exe.zip",
         "browser_download_url": "https://example.com/win.zip"},
    ]}
    with mock.patch("requests.get", return_value=FakeResponse(json_data=data)) as get:
        url = fetch_asset_url(release("4.3", "stable", False), Platform.WINDOWS_X86_64)
    assert url == "https://example.com/win.zip"
    assert get.call_args.args[0] == f"{GODOT_BUILDS_API}/4.3-stable"


def test_fetch_asset_url_reports_http_error():
    response = FakeResponse(status_code=404, reason="Not Found")
    with mock.patch("requests.get", return_value=response):
        with pytest.raises(DownloadError, match="404"):
            fetch_asset_url(release("9.9", "stable", False), Platform.LINUX_X86_64)


def test_download_release_rejects_unsafe_flavor():
    bad = GodotRelease(GodotVersion(4, 3, 0), "../bad", False)
    with pytest.raises(ValueError, match="flavor"):
        download_release(bad)


def test_download_release_writes_archive_to_temp_file():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("Godot_v4.3-stable_linux.x86_64", b"binary")
    body = buf.getvalue()
    api = {"assets": [{"name": "Godot_v4.3-stable_linux.x86_64.zip",
                       "browser_download_url": "https://example.com/godot.zip"}]}

    def fake_get(url, **kwargs):
        if url.startswith(GODOT_BUILDS_API):
            return FakeResponse(json_data=api)
        return FakeResponse(body=body, headers={"Content-Length": str(len(body))})

    with mock.patch("sys.platform", "linux"), mock.patch(
        "platform.machine", return_value="x86_64"
    ), mock.patch("requests.get", side_effect=fake_get):
        path = download_release(release("4.3", "stable", False))
    try:
        assert path.read_bytes() == body
    finally:
        path.unlink()


def test_download_release_reports_failed_download():
    api = {"assets": [{"name": "Godot_v4.3-stable_linux.x86_64.zip",
                       "browser_download_url": "https://example.com/godot.zip"}]}

    def fake_get(url, **kwargs):
        if url.startswith(GODOT_BUILDS_API):
            return FakeResponse(json_data=api)
        return FakeResponse(status_code=500, reason="Internal Server Error")

    with mock.patch("sys.platform", "linux"), mock.patch(
        "platform.machine", return_value="x86_64"
    ), mock.patch("requests.get", side_effect=fake_get):
        with pytest.raises(DownloadError, match="download failed with status 500"):
            download_release(release("4.3", "stable", False))