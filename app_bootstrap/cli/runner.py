"""CLI runner for the launcher."""

import sys
from pathlib import Path
from typing import Optional, Sequence, Union

from loguru import logger
from rich.console import Console
from rich.table import Table

from app_bootstrap.core.invoker import LaunchPlan, LaunchResult, resolve_plan, run_plan
from app_bootstrap.core.run_config import RunConfig, load_run_config
from app_bootstrap.core.settings import LauncherSettings, get_settings

DEFAULT_THEME = {
    "heading": "bold blue",
    "info": "bold bright_black",
    "warning": "bold yellow",
    "error": "bold red",
}

STDIN_MARKER = "-"


def render_plan(plan: LaunchPlan, console: Console) -> None:
    """Print the launch plan as a table."""
    table = Table(title="Launch plan", title_style=DEFAULT_THEME["heading"])
    table.add_column("Setting", style=DEFAULT_THEME["info"])
    table.add_column("Value")

    table.add_row("search path", str(plan.search_path))
    table.add_row("entry module", plan.entry_module)
    table.add_row(
        "entry path", str(plan.entry_path) if plan.entry_found else "<not found>"
    )
    table.add_row(
        "native library path",
        str(plan.native_library_path) if plan.native_library_path else "-",
    )
    table.add_row("extra paths", "\n".join(str(p) for p in plan.extra_paths) or "-")
    table.add_row("source", "defaults" if plan.is_default else "run configuration")
    console.print(table)


def write_config_file(
    path: Union[str, Path], config: RunConfig, fmt: str = "lines"
) -> Path:
    """Write `config` to `path` in the line-oriented or YAML shape."""
    p = Path(path)
    if fmt == "yaml":
        config.save_yaml(p)
    elif fmt == "lines":
        p.write_text(config.to_lines(), encoding="utf-8")
    else:
        raise ValueError(f"Unknown run configuration format: {fmt!r}")
    logger.info(f"Wrote {fmt} run configuration to {p}")
    return p


def run_launcher(
    config_path: Optional[str] = None,
    base_dir: Optional[Union[str, Path]] = None,
    app_args: Sequence[str] = (),
    dry_run: bool = False,
    settings: Optional[LauncherSettings] = None,
    console: Optional[Console] = None,
) -> LaunchResult:
    """Load the run configuration, resolve the entry and start it."""
    settings = settings or get_settings()
    console = console or Console(stderr=True)
    config_path = config_path or settings.run_config_path

    if config_path == STDIN_MARKER:
        config = load_run_config(sys.stdin)
    elif config_path is not None:
        config = load_run_config(config_path)
    else:
        search_dirs = [Path(base_dir)] if base_dir is not None else None
        config = load_run_config(search_dirs=search_dirs)

    plan = resolve_plan(config, base_dir=base_dir, settings=settings)

    if dry_run:
        render_plan(plan, console)
        return LaunchResult.DRY_RUN

    result = run_plan(plan, app_args)

    if result is LaunchResult.ENTRY_NOT_FOUND:
        console.print(
            f"Error starting the application: no entry module "
            f"'{plan.entry_module}' in {plan.search_path}",
            style=DEFAULT_THEME["error"],
        )
    elif result is LaunchResult.APPLICATION_ERROR:
        console.print(
            "Error in application. Check logs for details.",
            style=DEFAULT_THEME["error"],
        )
    return result
