"""Path resolution helpers for the launcher.

Resolves configured paths relative to a base directory, tells whether code runs
from the file system or from inside a zip archive, and manages the module and
native library search paths.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path
from typing import MutableMapping, Optional, Union
from urllib.parse import unquote

from loguru import logger

from app_bootstrap.core.constants import (
    ARCHIVE_SUFFIXES,
    NATIVE_LIBRARY_ENV_VARS,
    SKIPPED_SUBDIRS,
)

PathLike = Union[str, Path]


class RunLocation(str, Enum):
    """Where a path lives."""

    IN_FILE_SYSTEM = "in_file_system"
    IN_ARCHIVE = "in_archive"


class HostPlatform(str, Enum):
    """Host operating system family."""

    DARWIN = "darwin"
    WINDOWS = "windows"
    LINUX = "linux"
    OTHER = "other"


def host_platform(platform: Optional[str] = None) -> HostPlatform:
    """Map `sys.platform` (or the given value) to a HostPlatform."""
    name = (platform or sys.platform).lower()
    if name.startswith("darwin"):
        return HostPlatform.DARWIN
    if name.startswith(("win", "cygwin")):
        return HostPlatform.WINDOWS
    if name.startswith("linux"):
        return HostPlatform.LINUX
    return HostPlatform.OTHER


def _archive_index(parts: tuple[str, ...]) -> Optional[int]:
    """Index of the first path component that names a zip archive."""
    for i, part in enumerate(parts[:-1]):
        if Path(part).suffix.lower() in ARCHIVE_SUFFIXES:
            return i
    return None


def run_location(path: Optional[PathLike] = None) -> RunLocation:
    """Return whether `path` (default: this module) is inside a zip archive.

    A path is inside an archive when one of its parent components has an
    archive suffix, e.g. `dist/app.pyz/app_bootstrap/core/resolver.py`.
    """
    raw = str(path if path is not None else __file__).replace("\\", "/")
    if _archive_index(tuple(p for p in raw.split("/") if p)) is not None:
        return RunLocation.IN_ARCHIVE
    return RunLocation.IN_FILE_SYSTEM


def get_expanded_path(
    path: Optional[PathLike], base_dir: Optional[PathLike] = None
) -> Path:
    """Expand `path` against `base_dir` (default: cwd).

    Windows separators are normalized, `%xx` escapes decoded, and a leading
    `file:` scheme dropped unless the path points into an archive.

    Raises:
        ValueError: when `path` is None or blank.
    """
    if path is None or not str(path).strip():
        raise ValueError("Cannot expand an empty path.")

    raw = unquote(str(path).strip().replace("\\", "/"))
    if run_location(raw) is RunLocation.IN_FILE_SYSTEM:
        if raw.startswith("file:"):
            raw = raw[len("file:") :]
        if raw.startswith("///"):
            raw = raw[2:]

    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = Path(base_dir if base_dir is not None else Path.cwd()) / p
    return Path(os.path.normpath(p))


def add_to_load_path(
    path: PathLike, base_dir: Optional[PathLike] = None, prepend: bool = True
) -> Path:
    """Put the expanded `path` on `sys.path` (once) and return it."""
    resolved = get_expanded_path(path, base_dir)
    entry = str(resolved)
    if entry in sys.path:
        logger.debug(f"{entry} already on sys.path")
        return resolved
    if prepend:
        sys.path.insert(0, entry)
    else:
        sys.path.append(entry)
    logger.debug(f"Added {entry} to sys.path (prepend={prepend})")
    return resolved


def source_subdirectories(source_dir: PathLike) -> list[Path]:
    """Immediate subdirectories of `source_dir` worth adding to the load path."""
    root = Path(source_dir)
    if not root.is_dir():
        return []
    return sorted(
        p
        for p in root.iterdir()
        if p.is_dir() and not p.name.startswith(".") and p.name not in SKIPPED_SUBDIRS
    )


def add_native_library_path(
    path: PathLike,
    platform: Optional[HostPlatform] = None,
    environ: Optional[MutableMapping[str, str]] = None,
) -> str:
    """Prepend `path` to the host's native library search variable.

    Returns the name of the variable that was updated.
    """
    platform = platform or host_platform()
    env = os.environ if environ is None else environ
    var = NATIVE_LIBRARY_ENV_VARS[platform.value]
    entry = str(path)

    current = [p for p in env.get(var, "").split(os.pathsep) if p]
    if entry not in current:
        env[var] = os.pathsep.join([entry, *current])

    if platform is HostPlatform.WINDOWS and hasattr(os, "add_dll_directory"):
        try:
            os.add_dll_directory(entry)
        except OSError as e:
            logger.warning(f"Could not register DLL directory {entry}: {e}")

    logger.debug(f"Native library path {entry} added to {var}")
    return var
