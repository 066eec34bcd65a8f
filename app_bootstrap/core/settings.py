"""Runtime configuration for the launcher.

Uses Pydantic BaseSettings to read environment variables with the
`APP_BOOTSTRAP_` prefix. Command line flags take precedence.

Example:
    export APP_BOOTSTRAP_DEFAULT_SOURCE_DIR=app
    export APP_BOOTSTRAP_INCLUDE_SUBDIRECTORIES=true
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from app_bootstrap.core.constants import (
    DEFAULT_MAIN_FILE,
    DEFAULT_SOURCE_DIR,
    LOGS_FPATH,
)


class LauncherSettings(BaseSettings):
    """Launcher settings read from environment variables.

    Attributes:
        run_config_path (str | None): Explicit run configuration file. When unset
            the launcher searches for `run_configuration` next to it.
        default_source_dir (str): Source directory used when no config is usable.
        default_main_file (str): Entry file used when no config is usable.
        include_subdirectories (bool): Also put the source dir's immediate
            subdirectories on the module search path.
        log_dir (str): Directory for the rotated log file.
        log_to_file (bool): Whether to add the file sink at all.
    """

    model_config = SettingsConfigDict(env_prefix="APP_BOOTSTRAP_")

    run_config_path: Optional[str] = None
    default_source_dir: str = DEFAULT_SOURCE_DIR
    default_main_file: str = DEFAULT_MAIN_FILE
    include_subdirectories: bool = False
    log_dir: str = str(LOGS_FPATH)
    log_to_file: bool = True


def get_settings() -> LauncherSettings:
    """Read settings fresh from the environment."""
    return LauncherSettings()
