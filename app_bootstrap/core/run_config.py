"""Run configuration module.

The run configuration tells the launcher where the application lives. Two
shapes are accepted:

- structured, a YAML mapping::

    source_dir: src
    main_file: main
    native_library_path: lib/native   # optional

- line oriented, two or three lines: source dir, main file and optionally the
  native library path::

    src
    main
    lib/native
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import IO, Any, Iterable, Mapping, Optional, Union

import yaml
from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app_bootstrap.core.constants import (
    CONFIG_COMMENT_PREFIX,
    MAX_CONFIG_LINES,
    MIN_CONFIG_LINES,
    RUN_CONFIGURATION_FNAME,
)
from app_bootstrap.utils.serde import SerdeMixin

ConfigSource = Union[str, Path, IO[str], IO[bytes]]

_MAPPING_KEY_RE = re.compile(r"^\s*[A-Za-z_][\w-]*\s*:(\s|$)")
BOM = "\ufeff"


class RunConfig(SerdeMixin, BaseModel):
    """Where the application's sources and entry file are."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_dir: str = Field(
        validation_alias=AliasChoices("source_dir", "source_directory")
    )
    main_file: str = Field(
        validation_alias=AliasChoices("main_file", "main_entry_file")
    )
    native_library_path: Optional[str] = None

    @field_validator("source_dir", "main_file")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("native_library_path", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @classmethod
    def from_lines(cls, text: str) -> "RunConfig":
        """Build from the line-oriented shape. Comment and blank lines are skipped."""
        lines = [
            ln.strip()
            for ln in text.splitlines()
            if ln.strip() and not ln.strip().startswith(CONFIG_COMMENT_PREFIX)
        ]
        if not MIN_CONFIG_LINES <= len(lines) <= MAX_CONFIG_LINES:
            raise ValueError(
                f"Incorrect format for run configuration: expected "
                f"{MIN_CONFIG_LINES} or {MAX_CONFIG_LINES} lines "
                f"(source dir, main file, optional native library path), "
                f"got {len(lines)}."
            )
        data = {"source_dir": lines[0], "main_file": lines[1]}
        if len(lines) == MAX_CONFIG_LINES:
            data["native_library_path"] = lines[2]
        return cls.from_mapping(data)

    def to_lines(self) -> str:
        """Render the line-oriented shape."""
        lines = [self.source_dir, self.main_file]
        if self.native_library_path:
            lines.append(self.native_library_path)
        return "\n".join(lines) + "\n"


def parse_run_config(text: str) -> RunConfig:
    """Detect the shape of `text` and parse it.

    Raises:
        ValueError: content is empty, malformed or has invalid values.
    """
    if not text or not text.strip():
        raise ValueError("Run configuration is empty.")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        if any(_MAPPING_KEY_RE.match(ln) for ln in text.splitlines()):
            # looks structured; re-raise with the located YAML error
            return RunConfig.from_yaml(text)
        data = None

    if isinstance(data, Mapping):
        logger.debug("Run configuration is a structured document")
        return RunConfig.from_mapping(data)
    if isinstance(data, (list, tuple)):
        raise ValueError(
            "Run configuration must be a mapping or plain lines, not a list."
        )

    logger.debug("Run configuration is line oriented")
    return RunConfig.from_lines(text)


def default_search_dirs() -> list[Path]:
    """Where to look for `run_configuration` when no source is given."""
    dirs = [Path.cwd()]
    if sys.argv and sys.argv[0]:
        dirs.append(Path(sys.argv[0]).resolve().parent)
    return dirs


def find_run_config(search_dirs: Optional[Iterable[Path]] = None) -> Optional[Path]:
    """Return the first `run_configuration` file in `search_dirs`, if any."""
    seen: set[Path] = set()
    for d in search_dirs if search_dirs is not None else default_search_dirs():
        candidate = (Path(d) / RUN_CONFIGURATION_FNAME).resolve()
        if candidate in seen:
            continue
        seen.add(candidate)
        if candidate.is_file():
            return candidate
    return None


def load_run_config(
    source: Optional[ConfigSource] = None,
    search_dirs: Optional[Iterable[Path]] = None,
) -> Optional[RunConfig]:
    """Load the run configuration, or None when it is absent or invalid.

    Never raises: every I/O and parse error is logged and turned into None so
    the caller can fall back to the default entry.
    """
    origin = "<unknown>"
    try:
        if source is None:
            path = find_run_config(search_dirs)
            if path is None:
                logger.warning(
                    f"No '{RUN_CONFIGURATION_FNAME}' file found; "
                    "using configuration defaults."
                )
                return None
            origin = str(path)
            text: Union[str, bytes] = path.read_text(encoding="utf-8-sig")
        elif isinstance(source, (str, Path)):
            origin = str(source)
            p = Path(source)
            if not p.is_file():
                logger.warning(
                    f"Run configuration not found at {p}; using configuration defaults."
                )
                return None
            text = p.read_text(encoding="utf-8-sig")
        else:
            origin = str(getattr(source, "name", "<stream>"))
            text = source.read()

        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        text = text.removeprefix(BOM)
        config = parse_run_config(text)
    except Exception as e:
        logger.warning(
            f"Error loading run configuration from {origin}, "
            f"using configuration defaults: {e}"
        )
        return None

    logger.debug(f"Loaded run configuration from {origin}: {config.to_dict()}")
    return config
