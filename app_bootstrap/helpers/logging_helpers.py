"""Logging helpers for the launcher."""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"
CONSOLE_FORMAT = "<level>{level:<7}</level> | {message}"


def console_level(verbose: int) -> str:
    """Console level for a -v count: WARNING, then INFO (-v), then DEBUG (-vv)."""
    if verbose > 1:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return "WARNING"


def configure_logger(
    source: str,
    verbose: int = 0,
    log_dir: Optional[Union[str, Path]] = "logs",
) -> Optional[Path]:
    """Configure Loguru logging.

    Diagnostics always reach stderr. When `log_dir` is given a DEBUG file sink is
    added there as well. Returns the log file pattern, or None without one.
    """
    # Clear any previously added handlers
    logger.remove()

    # Console handler, the launcher's diagnostic stream
    logger.add(sink=sys.stderr, level=console_level(verbose), format=CONSOLE_FORMAT)

    if log_dir is None:
        logger.debug(f"Logger configured for source '{source}' without a file sink.")
        return None

    # File handler, DEBUG+, rotated daily, keep 7 days, zipped
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{source}_{'{time:YYYYMMDD}'}.log"

    logger.add(
        sink=str(log_path),
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    logger.info(
        f"Logger configured for source '{source}'. "
        f"Sinks: stderr (level={console_level(verbose)}+), file (level=DEBUG+) "
        f"at '{log_path}'."
    )
    return log_path
