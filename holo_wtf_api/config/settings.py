"""Typed runtime settings with layered resolution and startup validation.

Resolution order, highest wins:

1. `HOLO_WTF_<KEY>` environment variables (and a local `.env` file).
2. `PORT`, the listener port injected by the managed container runtime.
3. The packaged TOML file: the `[<environment>]` table over `[default]`.
4. Built-in field defaults.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Literal
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_ENV_PREFIX = "HOLO_WTF_"
CONFIG_FILE_ENV_NAME = "HOLO_WTF_CONFIG_FILE"
CONFIG_DEFAULT_FILE_NAME = "holo_wtf.toml"
CONFIG_PLATFORM_PORT_ENV_NAME = "PORT"
CONFIG_DEFAULT_SECTION = "default"
CONFIG_DEFAULT_ENVIRONMENT = "development"

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the HTTP service boundary and concert feed.

    Environment variable names are the field names in uppercase behind the
    `HOLO_WTF_` prefix. Example: `port` reads from `HOLO_WTF_PORT`.

    Keyword arguments passed to the constructor act as the packaged-file
    layer, so environment variables always override them. Keys that do not
    map to a field are kept verbatim and exposed by `settings_extra_values`.

    Attributes:
        environment: Runtime environment label selecting the file section.
        host: Host interface for the listening socket.
        port: Listening TCP port.
        log_level: Root logging level name.
        calendar_feed_url: ICS feed location for the concert calendar.
        calendar_timezone: IANA zone for floating and all-day feed times.
        calendar_request_timeout_seconds: Feed HTTP timeout.
        request_timeout_seconds: Per-request handler deadline.
        handler_worker_count: Handler worker pool size.
        shutdown_grace_seconds: Grace deadline for in-flight requests.
        startup_timeout_seconds: Maximum wait for the listener to come up.
        readiness_check_interval_seconds: Dependency re-check interval, 0 disables.
    """

    model_config = SettingsConfigDict(
        env_prefix=CONFIG_ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False,
        frozen=True,
    )

    environment: Literal["development", "production"] = Field(default=CONFIG_DEFAULT_ENVIRONMENT)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=32154, ge=1, le=65535)
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(default="info")
    calendar_feed_url: str = Field(min_length=1)
    calendar_timezone: str = Field(default="Asia/Tokyo")
    calendar_request_timeout_seconds: float = Field(default=10.0, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    handler_worker_count: int = Field(default=16, ge=1)
    shutdown_grace_seconds: float = Field(default=10.0, ge=0)
    startup_timeout_seconds: float = Field(default=10.0, gt=0)
    readiness_check_interval_seconds: float = Field(default=60.0, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        _ = (settings_cls, file_secret_settings)
        return env_settings, dotenv_settings, init_settings

    @field_validator("environment", "log_level", mode="before")
    @classmethod
    def _normalize_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("host must not be blank")
        return stripped_value

    @field_validator("calendar_feed_url")
    @classmethod
    def _validate_feed_url(cls, value: str) -> str:
        stripped_value = value.strip()
        parsed_url = urlsplit(stripped_value)
        if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
            raise ValueError("calendar_feed_url must be an absolute http(s) URL")
        return stripped_value

    @field_validator("calendar_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        stripped_value = value.strip()
        try:
            ZoneInfo(stripped_value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"unknown time zone: {value!r}") from error
        return stripped_value

    def settings_extra_values(self) -> dict[str, Any]:
        """Return provider-specific keys that have no typed field.

        Returns:
            dict[str, Any]: Opaque pass-through values keyed by lowercase name.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return dict(self.model_extra or {})

    def settings_calendar_zone(self) -> ZoneInfo:
        """Return the resolved calendar time zone object.

        Returns:
            ZoneInfo: Zone used for floating and all-day feed times.

        Raises:
            ZoneInfoNotFoundError: Not raised for validated settings.
        """

        return ZoneInfo(self.calendar_timezone)


def config_resolve_file_path(config_file_path: str | Path | None = None) -> Path:
    """Resolve the packaged configuration file location.

    Args:
        config_file_path: Explicit path, typically from the command line.

    Returns:
        Path: Explicit path, `HOLO_WTF_CONFIG_FILE`, or `./holo_wtf.toml`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if config_file_path is not None:
        return Path(config_file_path)
    environment_path = os.environ.get(CONFIG_FILE_ENV_NAME, "").strip()
    if environment_path:
        return Path(environment_path)
    return Path.cwd() / CONFIG_DEFAULT_FILE_NAME


def config_read_packaged_file(config_file_path: Path) -> dict[str, dict[str, Any]]:
    """Read the environment-sectioned TOML file.

    Args:
        config_file_path: File to read.

    Returns:
        dict[str, dict[str, Any]]: Sections keyed by lowercase name; empty when the file is absent.

    Raises:
        ConfigError: Raised when the file exists but cannot be read or parsed.
    """

    if not config_file_path.is_file():
        logger.info("Packaged configuration file %s not found, using defaults and environment", config_file_path)
        return {}

    try:
        with config_file_path.open("rb") as config_file:
            document = tomllib.load(config_file)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise ConfigError(f"Packaged configuration file {config_file_path} could not be read: {error}") from error

    sections: dict[str, dict[str, Any]] = {}
    for section_name, section_values in document.items():
        if not isinstance(section_values, dict):
            raise ConfigError(
                f"Packaged configuration file {config_file_path} must contain only tables, "
                f"found top-level key {section_name!r}"
            )
        sections[section_name.strip().lower()] = {key.strip().lower(): value for key, value in section_values.items()}
    return sections


def config_load_settings(config_file_path: str | Path | None = None) -> AppSettings:
    """Load and validate runtime settings from all configuration layers.

    Args:
        config_file_path: Optional explicit packaged file location.

    Returns:
        AppSettings: Validated, immutable runtime settings object.

    Raises:
        ConfigError: Raised when required settings are missing or invalid.
    """

    resolved_path = config_resolve_file_path(config_file_path)
    sections = config_read_packaged_file(resolved_path)
    environment_name = _config_resolve_environment_name(sections)

    layered_values: dict[str, Any] = {}
    layered_values.update(sections.get(CONFIG_DEFAULT_SECTION, {}))
    layered_values.update(sections.get(environment_name, {}))
    platform_port = os.environ.get(CONFIG_PLATFORM_PORT_ENV_NAME, "").strip()
    if platform_port:
        layered_values["port"] = platform_port
    layered_values.update(_config_collect_extra_environment_values())

    try:
        return AppSettings(**layered_values)
    except ValidationError as error:
        raise ConfigError(
            f"Startup configuration validation failed. Update {resolved_path.name} or "
            f"{CONFIG_ENV_PREFIX}* environment variables. Details: {error}"
        ) from error


class _EnvironmentSelector(BaseSettings):
    """Environment label read from the same environment and `.env` layers as `AppSettings`."""

    model_config = SettingsConfigDict(
        env_prefix=CONFIG_ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: str | None = None


def _config_resolve_environment_name(sections: dict[str, dict[str, Any]]) -> str:
    """Pick the active environment before the file section is selected."""

    environment_value = _EnvironmentSelector().environment
    if environment_value is None or not environment_value.strip():
        environment_value = sections.get(CONFIG_DEFAULT_SECTION, {}).get("environment", CONFIG_DEFAULT_ENVIRONMENT)
    return str(environment_value).strip().lower()


def _config_collect_extra_environment_values() -> dict[str, str]:
    """Collect prefixed environment variables that map to no typed field."""

    known_keys = set(AppSettings.model_fields) | {"config_file"}
    extra_values: dict[str, str] = {}
    for environment_name, environment_value in os.environ.items():
        if not environment_name.upper().startswith(CONFIG_ENV_PREFIX):
            continue
        key = environment_name[len(CONFIG_ENV_PREFIX):].lower()
        if key and key not in known_keys:
            extra_values[key] = environment_value
    return extra_values
