"""Conftest fixtures for core tests."""

import pytest

from app_bootstrap.core.settings import LauncherSettings


@pytest.fixture
def settings() -> LauncherSettings:
    """Launcher settings with the stock defaults, ignoring the environment."""
    return LauncherSettings(
        run_config_path=None,
        default_source_dir="src",
        default_main_file="main",
        include_subdirectories=False,
        log_to_file=False,
    )
