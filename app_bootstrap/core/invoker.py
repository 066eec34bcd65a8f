"""Bootstrap invoker module.

Turns a (possibly absent) run configuration into a launch plan and runs the
application's entry module in this interpreter.
"""

from __future__ import annotations

import os
import runpy
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from app_bootstrap.core.resolver import (
    add_native_library_path,
    add_to_load_path,
    get_expanded_path,
    source_subdirectories,
)
from app_bootstrap.core.run_config import RunConfig
from app_bootstrap.core.settings import LauncherSettings, get_settings


class LaunchResult(str, Enum):
    """Outcome of a launch attempt."""

    STARTED = "started"
    ENTRY_NOT_FOUND = "entry_not_found"
    APPLICATION_ERROR = "application_error"
    DRY_RUN = "dry_run"

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return 0 if self in (LaunchResult.STARTED, LaunchResult.DRY_RUN) else 1


class LaunchPlan(BaseModel):
    """Everything needed to start the application."""

    model_config = ConfigDict(frozen=True)

    search_path: Path
    entry_module: str
    entry_path: Optional[Path] = None
    native_library_path: Optional[Path] = None
    extra_paths: list[Path] = Field(default_factory=list)
    is_default: bool = False

    @property
    def entry_found(self) -> bool:
        """Whether the entry module was located on disk."""
        return self.entry_path is not None


def entry_module_name(main_file: str) -> str:
    """Dotted display name for a main file, e.g. `app/main.py` -> `app.main`."""
    s = main_file.strip().replace("\\", "/")
    if s.endswith(".py"):
        s = s[: -len(".py")]
    parts = [p for p in s.split("/") if p and p not in (".", "..")]
    if not parts:
        raise ValueError(f"Cannot derive an entry module from {main_file!r}.")
    return ".".join(parts)


def locate_entry(search_path: Path, main_file: str) -> Optional[Path]:
    """Find the file (or package dir with `__main__.py`) for `main_file`.

    `main_file` is a path relative to `search_path`; `.py` is added when it
    is missing. A bare dotted name such as `app.main` is also tried as
    `app/main.py`.
    """
    rel = main_file.strip().replace("\\", "/")
    stem = rel[: -len(".py")] if rel.endswith(".py") else rel
    stems = [stem]
    if "/" not in stem and "." in stem.strip("."):
        stems.append(stem.replace(".", "/"))

    for s in stems:
        base = Path(os.path.normpath(search_path / s))
        module_file = base.with_name(base.name + ".py")
        if module_file.is_file():
            return module_file
        if (base / "__main__.py").is_file():
            return base
        if base.is_file() and base.suffix:
            return base
    return None


def build_launch_plan(
    config: Optional[RunConfig],
    base_dir: Optional[Union[str, Path]] = None,
    settings: Optional[LauncherSettings] = None,
) -> LaunchPlan:
    """Resolve `config` (or the defaults when it is None) into a LaunchPlan."""
    settings = settings or get_settings()
    base = Path(base_dir) if base_dir is not None else Path.cwd()

    if config is None:
        source_dir = settings.default_source_dir
        main_file = settings.default_main_file
        native = None
    else:
        source_dir = config.source_dir
        main_file = config.main_file
        native = config.native_library_path

    search_path = get_expanded_path(source_dir, base)
    entry_module = entry_module_name(main_file)
    plan = LaunchPlan(
        search_path=search_path,
        entry_module=entry_module,
        entry_path=locate_entry(search_path, main_file),
        native_library_path=get_expanded_path(native, base) if native else None,
        extra_paths=(
            source_subdirectories(search_path)
            if settings.include_subdirectories
            else []
        ),
        is_default=config is None,
    )
    logger.debug(f"Launch plan: {plan}")
    return plan


def _default_plan(
    base_dir: Optional[Union[str, Path]], settings: Optional[LauncherSettings]
) -> LaunchPlan:
    """Plan for the default entry; unusable defaults give a plan with no entry."""
    try:
        return build_launch_plan(None, base_dir, settings)
    except ValueError as e:
        settings = settings or get_settings()
        base = Path(base_dir) if base_dir is not None else Path.cwd()
        logger.error(f"Unusable default entry settings: {e}")
        return LaunchPlan(
            search_path=Path(os.path.normpath(base / settings.default_source_dir)),
            entry_module=settings.default_main_file.strip() or "<none>",
            is_default=True,
        )


def resolve_plan(
    config: Optional[RunConfig],
    base_dir: Optional[Union[str, Path]] = None,
    settings: Optional[LauncherSettings] = None,
) -> LaunchPlan:
    """Build the plan for `config`, falling back to the default entry if needed."""
    if config is None:
        return _default_plan(base_dir, settings)

    try:
        plan = build_launch_plan(config, base_dir, settings)
    except ValueError as e:
        logger.warning(f"Unusable run configuration ({e}); using the default entry.")
        return _default_plan(base_dir, settings)

    if plan.entry_found:
        return plan

    logger.warning(
        f"Entry module '{plan.entry_module}' not found in {plan.search_path}; "
        "falling back to the default entry."
    )
    return _default_plan(base_dir, settings)


def run_plan(plan: LaunchPlan, argv: Sequence[str] = ()) -> LaunchResult:
    """Adjust the search paths and run the plan's entry as `__main__`."""
    if plan.entry_path is None:
        logger.error(
            f"Error starting the application: entry module '{plan.entry_module}' "
            f"not found in {plan.search_path}"
        )
        return LaunchResult.ENTRY_NOT_FOUND

    if plan.native_library_path is not None:
        add_native_library_path(plan.native_library_path)
    add_to_load_path(plan.search_path)
    for extra in plan.extra_paths:
        add_to_load_path(extra, prepend=False)

    saved_argv = sys.argv[:]
    sys.argv = [str(plan.entry_path), *argv]
    logger.info(f"Starting {plan.entry_module} from {plan.entry_path}")
    try:
        runpy.run_path(str(plan.entry_path), run_name="__main__")
    except Exception as e:
        logger.exception(f"Error in application: {e}")
        return LaunchResult.APPLICATION_ERROR
    finally:
        sys.argv = saved_argv

    logger.info(f"{plan.entry_module} finished")
    return LaunchResult.STARTED


def invoke(
    config: Optional[RunConfig],
    argv: Sequence[str] = (),
    base_dir: Optional[Union[str, Path]] = None,
    settings: Optional[LauncherSettings] = None,
) -> LaunchResult:
    """Start the application described by `config`, or the default entry."""
    return run_plan(resolve_plan(config, base_dir, settings), argv)
