"""The main entry point for pytest fixtures.

This will run before any tests are executed when `import pytest` is called.
"""

from __future__ import annotations

import logging
import sys
import textwrap
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"


def _setup_logging() -> None:
    """Add a file sink to the default pytest console logging."""
    # logs/pytest_YYYYMMDD.log
    logs_dir = Path(__file__).resolve().parent.parent / "logs"
    logs_dir.mkdir(exist_ok=True)
    logfile = logs_dir / f"pytest_{datetime.now():%Y%m%d}.log"

    logger.add(
        logfile,
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    # Intercept stdlib logging so everything funnels through Loguru
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = logging.getLevelName(record.levelno)
            logger.opt(depth=6, exception=record.exc_info, colors=False).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def pytest_configure(config: pytest.Config) -> None:
    """Pytest configuration hook to add a file sink to default pytest logging."""
    _setup_logging()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a text file inside tmp_path and give back its path.

    Returns:
      a function you can call with (relative_path, body)
    """

    def _write(relpath: str, body: str) -> Path:
        file_path = tmp_path / relpath
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(textwrap.dedent(body).lstrip("\n"), encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def log_messages() -> Iterator[list[dict[str, Any]]]:
    """Collect loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    try:
        yield records
    finally:
        logger.remove(handler_id)


@pytest.fixture(autouse=True)
def _isolate_interpreter_state(
    tmp_path_factory: pytest.TempPathFactory,
) -> Iterator[None]:
    """Undo the launcher's changes to sys.path, sys.argv and sys.modules.

    Launched test applications share module names (`main`, `helper`), so any
    module loaded from a temp dir is dropped again after each test.
    """
    saved_path = sys.path[:]
    saved_argv = sys.argv[:]
    saved_modules = set(sys.modules)
    base_temp = str(tmp_path_factory.getbasetemp())
    try:
        yield
    finally:
        sys.path[:] = saved_path
        sys.argv[:] = saved_argv
        for name in set(sys.modules) - saved_modules:
            origin = getattr(sys.modules[name], "__file__", None) or ""
            if origin.startswith(base_temp):
                del sys.modules[name]
