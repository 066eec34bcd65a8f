"""Constants for core module."""

from pathlib import Path

# --- Run configuration --- #
RUN_CONFIGURATION_FNAME: str = "run_configuration"
CONFIG_COMMENT_PREFIX: str = "#"
MIN_CONFIG_LINES: int = 2
MAX_CONFIG_LINES: int = 3

# --- Default entry (used when no usable run configuration exists) --- #
DEFAULT_SOURCE_DIR: str = "src"
DEFAULT_MAIN_FILE: str = "main"

# --- I/O --- #
LOGS_FPATH: Path = Path("logs")

# --- Path resolution --- #
ARCHIVE_SUFFIXES: frozenset[str] = frozenset(
    {".zip", ".pyz", ".pyzw", ".egg", ".whl"}
)
SKIPPED_SUBDIRS: frozenset[str] = frozenset({"__pycache__", "node_modules"})

# native library search variable per host platform
NATIVE_LIBRARY_ENV_VARS: dict[str, str] = {
    "linux": "LD_LIBRARY_PATH",
    "darwin": "DYLD_LIBRARY_PATH",
    "windows": "PATH",
    "other": "LD_LIBRARY_PATH",
}
