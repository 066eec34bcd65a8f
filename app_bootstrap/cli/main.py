"""Module to run the launcher from the command line."""

import argparse
import sys
from typing import Optional, Sequence

from loguru import logger

from app_bootstrap.cli.runner import run_launcher, write_config_file
from app_bootstrap.core.run_config import RunConfig
from app_bootstrap.core.settings import get_settings
from app_bootstrap.helpers.logging_helpers import configure_logger

LOG_SOURCE = "launcher"


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the launcher."""
    parser = argparse.ArgumentParser(
        prog="app-bootstrap",
        description="Start an application from its run configuration.",
        epilog="Arguments after `--` are passed to the application.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Run configuration file ('-' reads stdin). "
        "Defaults to ./run_configuration.",
    )
    parser.add_argument(
        "--base-dir",
        type=str,
        default=None,
        help="Directory relative paths are resolved against (default: cwd).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the launch plan without starting the application.",
    )
    parser.add_argument(
        "--include-subdirs",
        action="store_true",
        default=None,
        help="Also put the source dir's subdirectories on the module search path.",
    )

    write = parser.add_argument_group("writing a run configuration")
    write.add_argument("--write-config", type=str, default=None, metavar="PATH")
    write.add_argument("--source-dir", type=str, default=None)
    write.add_argument("--main-file", type=str, default=None)
    write.add_argument("--native-library-path", type=str, default=None)
    write.add_argument("--format", choices=("lines", "yaml"), default="lines")

    parser.add_argument("--log-dir", type=str, default=None)
    parser.add_argument("--no-log-file", action="store_true")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show info logs (-v) or debug (-vv) to console",
    )
    return parser


def split_app_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first `--` into launcher and application arguments."""
    argv = list(argv)
    if "--" in argv:
        idx = argv.index("--")
        return argv[:idx], argv[idx + 1 :]
    return argv, []


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entrypoint for the launcher. Returns the process exit code."""
    launcher_args, app_args = split_app_args(
        sys.argv[1:] if argv is None else argv
    )
    parser = build_parser()
    args = parser.parse_args(launcher_args)

    settings = get_settings()
    overrides = {}
    if args.include_subdirs is not None:
        overrides["include_subdirectories"] = args.include_subdirs
    if args.log_dir is not None:
        overrides["log_dir"] = args.log_dir
    if args.no_log_file:
        overrides["log_to_file"] = False
    settings = settings.model_copy(update=overrides)

    try:
        configure_logger(
            source=LOG_SOURCE,
            verbose=args.verbose,
            log_dir=settings.log_dir if settings.log_to_file else None,
        )
    except Exception as e:
        logger.warning(f"Failed to configure logger with source '{LOG_SOURCE}': {e}")

    if args.write_config is not None:
        if not args.source_dir or not args.main_file:
            parser.error("--write-config needs --source-dir and --main-file")
        try:
            config = RunConfig.from_mapping(
                {
                    "source_dir": args.source_dir,
                    "main_file": args.main_file,
                    "native_library_path": args.native_library_path,
                }
            )
            write_config_file(args.write_config, config, fmt=args.format)
        except (ValueError, OSError) as e:
            logger.error(f"Could not write run configuration: {e}")
            return 1
        return 0

    logger.info("Starting launcher.")
    try:
        result = run_launcher(
            config_path=args.config,
            base_dir=args.base_dir,
            app_args=app_args,
            dry_run=args.dry_run,
            settings=settings,
        )
    finally:
        logger.info("Launcher exited.")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
