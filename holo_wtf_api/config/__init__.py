"""Configuration package for runtime settings and startup validation."""

from .logging import config_configure_logging
from .settings import (
    CONFIG_ENV_PREFIX,
    CONFIG_FILE_ENV_NAME,
    AppSettings,
    ConfigError,
    config_load_settings,
    config_read_packaged_file,
    config_resolve_file_path,
)

__all__ = [
    "AppSettings",
    "CONFIG_ENV_PREFIX",
    "CONFIG_FILE_ENV_NAME",
    "ConfigError",
    "config_configure_logging",
    "config_load_settings",
    "config_read_packaged_file",
    "config_resolve_file_path",
]
