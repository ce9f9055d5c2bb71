# ggg

A Python library for working with specific Godot engine builds: identify a
release, find the right download for your platform, keep extracted binaries in
a local cache, and launch them. It also reads `project.godot` metadata, safely
scans and extracts zip and tar.gz archives, and queries the Godot Asset
Library.

Install with `pip install .` (add `.[test]` to get pytest for the test suite).

## Identifying releases

```python
from ggg.release import GodotVersion, GodotRelease

version = GodotVersion.parse("4.3.0")
str(version)                      # "4.3" - a zero patch is omitted

release = GodotRelease.parse("4.3-stable-mono")
release.tag()                     # "4.3-stable"  (the Mono flag is not part of the tag)
release.cache_key()               # "4.3-stable-mono"
str(release)                      # "4.3-stable-mono"
release.is_stable()               # True
release.validate()                # raises ValueError if the flavor is unsafe as a path
```

Versions are frozen dataclasses that compare component-wise (major, minor,
patch). Malformed strings raise `ValueError`. `validate_path_component` is the
check behind `validate`: only alphanumerics, `.` and `-` are accepted.

## Reading a project

```python
from ggg.project import read_project_info

info = read_project_info("project.godot")
if info is not None:
    print(info.version, info.mono)
```

`read_project_info` returns `None` when the file has no usable
`config/features=PackedStringArray(...)` line; `mono` is true when `"C#"` is
among the features. `parse_project_info` does the same on a string.

## Listing known releases

```python
from ggg.manifest import fetch_versions

for release in fetch_versions():      # newest first
    print(release)
```

`fetch_versions` downloads the Godot website's versions manifest.
`parse_versions` parses manifest YAML you already have; each series yields its
latest flavor followed by its older pre-releases, and entries whose version
numbers are not recognised are skipped. Invalid YAML raises `ValueError`.

## Downloading, caching and launching

```python
from ggg.cache import GodotCache
from ggg.engine import ensure, launch
from ggg.release import GodotRelease

cache = GodotCache("/path/to/cache/godot")
release = GodotRelease.parse("4.3-stable")

executable = ensure(release, cache)   # downloads and extracts on a cache miss
exit_code = launch(executable, ["--editor", "--path", "."])
```

- `GodotCache` keeps each release in a subdirectory named after its cache key
  (`release_dir`). `contains` treats an empty directory as not installed,
  `install` replaces any previous contents, and `remove` does nothing when the
  release is absent.
- Archives are scanned before extraction and rejected as a whole if any entry
  has an absolute path or a `..` component. On POSIX the executable bit is set
  on the installed binary.
- `find_executable` searches two directory levels; when there are several
  candidates the non-console one is chosen, and on macOS the binary inside a
  `.app` bundle is used. `is_godot_executable` and `is_console_executable`
  expose the name checks.
- `launch` runs the executable with the terminal's stdin, stdout and stderr
  and returns its exit code.

### Platforms and assets

`ggg.download.Platform.current()` detects Linux x86_64, macOS or Windows
x86_64 and raises `DownloadError` elsewhere. `select_asset` picks the matching
`Asset` from a release's asset list, falling back to older naming schemes (for
example `_x11.64` on Linux) and keeping Mono and standard builds apart.
`fetch_asset_url` looks the asset up on GitHub, and `download_release` streams
it to a temporary file with a progress bar; the caller removes that file.

## Archives

`ggg.archive` provides `check_path`, `scan_zip`, `scan_tar_gz`, `extract_zip`
and `extract_tar_gz`. Unsafe or unreadable archives raise `ArchiveError`.
`__MACOSX` entries in zip files are skipped, directory entries are skipped
(parents are created as needed), and every extracted file is made read-only.

## Godot Asset Library

```python
from ggg.asset_lib import search, get_asset

results, total = search("gut", "4.3")
for item in results:
    print(item.asset_id, item.title, item.author, item.license)

detail = get_asset(results[0].asset_id)
print(detail.version, detail.version_string, detail.download_url, detail.download_hash)
```

Pass an empty version string to `search` to skip version filtering. `total`
may exceed `len(results)` when there are several pages. `download_hash` is
`None` when the asset author has not provided one. Network and parse failures
raise `AssetLibError`; `AssetSearchResult.from_json` and
`AssetDetail.from_json` raise `ValueError` on malformed data.

## What it does not do

This is a library only: it installs no command-line tool. It does not read or
write a project configuration or lock file, does not manage addon dependencies
from git or archive URLs, and does not pick a default cache location - you
pass the cache directory to `GodotCache` yourself.