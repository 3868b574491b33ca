"""Tests for layered configuration resolution and startup validation."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from holo_wtf_api.config import AppSettings, ConfigError, config_load_settings

_FEED_URL = "https://calendar.example.test/feed.ics"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove inherited configuration variables and run from an empty directory.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Per-test temporary directory.

    Returns:
        None: Environment is isolated as a side effect.

    Raises:
        RuntimeError: This fixture does not raise runtime errors.
    """

    for environment_name in list(os.environ):
        if environment_name.upper().startswith("HOLO_WTF_") or environment_name.upper() == "PORT":
            monkeypatch.delenv(environment_name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "holo_wtf.toml"
    config_path.write_text(content, encoding="utf-8")
    return config_path


def test_config_defaults_apply_when_only_required_key_is_supplied(monkeypatch: pytest.MonkeyPatch) -> None:
    """Resolve built-in defaults when no file exists and only the required key is set.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate default resolution.

    Raises:
        AssertionError: Raised when defaults are not applied.
    """

    monkeypatch.setenv("HOLO_WTF_CALENDAR_FEED_URL", _FEED_URL)

    settings = config_load_settings()

    assert settings.environment == "development"
    assert settings.host == "0.0.0.0"
    assert settings.port == 32154
    assert settings.calendar_feed_url == _FEED_URL
    assert settings.settings_extra_values() == {}


def test_config_missing_required_key_raises_config_error() -> None:
    """Fail fast when the required feed URL has no file entry and no override.

    Returns:
        None: Assertions validate fail-fast behavior.

    Raises:
        AssertionError: Raised when the loader accepts a partial configuration.
    """

    with pytest.raises(ConfigError, match="calendar_feed_url"):
        config_load_settings()


def test_config_environment_section_overrides_default_section(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Overlay the active environment table on top of the default table.

    Args:
        tmp_path: Per-test temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate section precedence.

    Raises:
        AssertionError: Raised when section precedence is wrong.
    """

    _write_config(
        tmp_path,
        f"""
[default]
port = 9000
host = "10.0.0.1"
calendar_feed_url = "{_FEED_URL}"

[production]
port = 9100
""",
    )
    monkeypatch.setenv("HOLO_WTF_ENVIRONMENT", "production")

    settings = config_load_settings()

    assert settings.environment == "production"
    assert settings.port == 9100
    assert settings.host == "10.0.0.1"


def test_config_environment_variable_overrides_packaged_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Let prefixed environment variables win over every file section.

    Args:
        tmp_path: Per-test temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate environment precedence.

    Raises:
        AssertionError: Raised when the file value wins.
    """

    _write_config(
        tmp_path,
        f"""
[default]
environment = "development"
calendar_feed_url = "{_FEED_URL}"

[development]
port = 9200
""",
    )
    monkeypatch.setenv("HOLO_WTF_PORT", "9300")

    settings = config_load_settings()

    assert settings.port == 9300


def test_config_default_section_selects_environment_when_variable_is_absent(tmp_path: Path) -> None:
    """Use `[default].environment` to pick the section when no override is set.

    Args:
        tmp_path: Per-test temporary directory.

    Returns:
        None: Assertions validate environment selection.

    Raises:
        AssertionError: Raised when the wrong section is applied.
    """

    config_path = _write_config(
        tmp_path,
        f"""
[default]
environment = "production"
calendar_feed_url = "{_FEED_URL}"

[development]
log_level = "debug"

[production]
log_level = "warning"
""",
    )

    settings = config_load_settings(config_file_path=config_path)

    assert settings.environment == "production"
    assert settings.log_level == "warning"


def test_config_platform_port_overrides_file_but_not_prefixed_variable(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Apply the runtime-injected `PORT` between the file and prefixed variables.

    Args:
        tmp_path: Per-test temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate `PORT` precedence.

    Raises:
        AssertionError: Raised when `PORT` precedence is wrong.
    """

    _write_config(tmp_path, f'[default]\nport = 9000\ncalendar_feed_url = "{_FEED_URL}"\n')
    monkeypatch.setenv("PORT", "8080")

    assert config_load_settings().port == 8080

    monkeypatch.setenv("HOLO_WTF_PORT", "8181")

    assert config_load_settings().port == 8181


@pytest.mark.parametrize("port_value", ["0", "65536", "not-a-port"])
def test_config_invalid_port_raises_config_error(monkeypatch: pytest.MonkeyPatch, port_value: str) -> None:
    """Reject ports that do not parse as an integer in 1-65535.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        port_value: Candidate port text.

    Returns:
        None: Assertions validate port validation.

    Raises:
        AssertionError: Raised when an invalid port is accepted.
    """

    monkeypatch.setenv("HOLO_WTF_CALENDAR_FEED_URL", _FEED_URL)
    monkeypatch.setenv("HOLO_WTF_PORT", port_value)

    with pytest.raises(ConfigError, match="port"):
        config_load_settings()


def test_config_blank_host_and_unknown_environment_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject a blank host and an environment outside the supported set.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate host and environment validation.

    Raises:
        AssertionError: Raised when invalid values are accepted.
    """

    monkeypatch.setenv("HOLO_WTF_CALENDAR_FEED_URL", _FEED_URL)
    monkeypatch.setenv("HOLO_WTF_HOST", "   ")
    with pytest.raises(ConfigError, match="host"):
        config_load_settings()

    monkeypatch.delenv("HOLO_WTF_HOST")
    monkeypatch.setenv("HOLO_WTF_ENVIRONMENT", "staging")
    with pytest.raises(ConfigError, match="environment"):
        config_load_settings()


def test_config_unknown_keys_pass_through_opaquely(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep provider-specific keys from the file and the environment untouched.

    Args:
        tmp_path: Per-test temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate pass-through behavior.

    Raises:
        AssertionError: Raised when unknown keys are dropped or rejected.
    """

    _write_config(
        tmp_path,
        f"""
[default]
calendar_feed_url = "{_FEED_URL}"
cloud_run_region = "us-central1"
""",
    )
    monkeypatch.setenv("HOLO_WTF_TRACE_SAMPLE_RATE", "0.25")

    extra_values = config_load_settings().settings_extra_values()

    assert extra_values["cloud_run_region"] == "us-central1"
    assert extra_values["trace_sample_rate"] == "0.25"


def test_config_malformed_file_raises_config_error(tmp_path: Path) -> None:
    """Treat an unparsable packaged file as a fatal configuration error.

    Args:
        tmp_path: Per-test temporary directory.

    Returns:
        None: Assertions validate malformed file handling.

    Raises:
        AssertionError: Raised when a malformed file is accepted.
    """

    config_path = _write_config(tmp_path, "[default\nport = ")

    with pytest.raises(ConfigError, match="could not be read"):
        config_load_settings(config_file_path=config_path)


def test_config_settings_are_immutable() -> None:
    """Reject attribute assignment after construction.

    Returns:
        None: Assertions validate immutability.

    Raises:
        AssertionError: Raised when settings can be mutated.
    """

    settings = AppSettings(calendar_feed_url=_FEED_URL)

    with pytest.raises(Exception):
        settings.port = 1234  # type: ignore[misc]
    assert settings.port == 32154


def test_config_dotenv_environment_selects_matching_file_section(tmp_path: Path) -> None:
    """Pick the file section from an environment label set in `.env`.

    Args:
        tmp_path: Per-test temporary directory, also the working directory.

    Returns:
        None: Assertions validate that label and applied section agree.

    Raises:
        AssertionError: Raised when the section disagrees with the resolved label.
    """

    _write_config(
        tmp_path,
        f"""
[default]
calendar_feed_url = "{_FEED_URL}"

[development]
host = "127.0.0.1"

[production]
host = "0.0.0.0"
port = 9999
""",
    )
    (tmp_path / ".env").write_text("HOLO_WTF_ENVIRONMENT=production\n", encoding="utf-8")

    settings = config_load_settings()

    assert settings.environment == "production"
    assert settings.host == "0.0.0.0"
    assert settings.port == 9999
