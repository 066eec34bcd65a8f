"""Tests for path resolution helpers."""

import os
import sys
from pathlib import Path

import pytest

from app_bootstrap.core.resolver import (
    HostPlatform,
    RunLocation,
    add_native_library_path,
    add_to_load_path,
    get_expanded_path,
    host_platform,
    run_location,
    source_subdirectories,
)


@pytest.mark.unit
def test_expanded_path_handles_both_separator_styles(tmp_path: Path) -> None:
    """Should resolve Unix and Windows style relative paths the same way."""
    assert get_expanded_path("foo/bar/baz", tmp_path) == (
        tmp_path / "foo" / "bar" / "baz"
    )
    assert get_expanded_path("foo2\\bar2\\baz2", tmp_path) == (
        tmp_path / "foo2" / "bar2" / "baz2"
    )


@pytest.mark.unit
def test_expanded_path_strips_file_scheme_and_escapes(tmp_path: Path) -> None:
    """Should drop `file:` and decode %20 outside archives."""
    resolved = get_expanded_path(f"file:{tmp_path}/my%20app", tmp_path)
    assert resolved == tmp_path / "my app"
    assert "file:" not in str(resolved)


@pytest.mark.unit
def test_expanded_path_defaults_to_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Should resolve relative paths against the working directory."""
    monkeypatch.chdir(tmp_path)
    assert get_expanded_path("./src/../lib") == Path.cwd() / "lib"


@pytest.mark.unit
@pytest.mark.parametrize("bad", [None, "", "   "])
def test_expanded_path_rejects_empty(bad: object) -> None:
    """Should refuse to expand a missing path."""
    with pytest.raises(ValueError):
        get_expanded_path(bad)  # type: ignore[arg-type]


@pytest.mark.unit
def test_run_location() -> None:
    """Should detect paths that point inside a zip archive."""
    assert run_location("dist/app.pyz/pkg/mod.py") is RunLocation.IN_ARCHIVE
    assert run_location("C:\\apps\\bundle.zip\\main.py") is RunLocation.IN_ARCHIVE
    assert run_location("dist/app.pyz") is RunLocation.IN_FILE_SYSTEM
    assert run_location() is RunLocation.IN_FILE_SYSTEM


@pytest.mark.unit
def test_add_to_load_path_prepends_once(tmp_path: Path) -> None:
    """Should put the directory first on sys.path without duplicates."""
    added = add_to_load_path("src", tmp_path)
    add_to_load_path(tmp_path / "src")
    assert added == tmp_path / "src"
    assert sys.path[0] == str(added)
    assert sys.path.count(str(added)) == 1

    appended = add_to_load_path("vendor", tmp_path, prepend=False)
    assert sys.path[-1] == str(appended)


@pytest.mark.unit
def test_source_subdirectories(tmp_path: Path) -> None:
    """Should list visible subdirectories only."""
    for name in ("models", "views", ".git", "__pycache__"):
        (tmp_path / name).mkdir()
    (tmp_path / "main.py").write_text("")

    assert source_subdirectories(tmp_path) == [tmp_path / "models", tmp_path / "views"]
    assert source_subdirectories(tmp_path / "missing") == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "name,expected",
    [
        ("darwin", HostPlatform.DARWIN),
        ("win32", HostPlatform.WINDOWS),
        ("cygwin", HostPlatform.WINDOWS),
        ("linux", HostPlatform.LINUX),
        ("freebsd14", HostPlatform.OTHER),
    ],
)
def test_host_platform(name: str, expected: HostPlatform) -> None:
    """Should map sys.platform values to platform families."""
    assert host_platform(name) is expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "platform,var",
    [
        (HostPlatform.LINUX, "LD_LIBRARY_PATH"),
        (HostPlatform.DARWIN, "DYLD_LIBRARY_PATH"),
        (HostPlatform.OTHER, "LD_LIBRARY_PATH"),
    ],
)
def test_add_native_library_path(platform: HostPlatform, var: str) -> None:
    """Should prepend the directory to the platform's library variable once."""
    env = {var: "/usr/local/lib"}
    assert add_native_library_path("/opt/native", platform, env) == var
    add_native_library_path("/opt/native", platform, env)
    assert env[var] == os.pathsep.join(["/opt/native", "/usr/local/lib"])


@pytest.mark.unit
def test_add_native_library_path_windows_uses_path(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Should update PATH and register a DLL directory on Windows."""
    registered: list[str] = []
    monkeypatch.setattr(os, "add_dll_directory", registered.append, raising=False)

    env: dict[str, str] = {}
    assert add_native_library_path("C:/native", HostPlatform.WINDOWS, env) == "PATH"
    assert env["PATH"] == "C:/native"
    assert registered == ["C:/native"]
