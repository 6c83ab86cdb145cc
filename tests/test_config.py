"""Tests for settings loading and validation."""

import pytest

import config
from config import SettingsError, get_settings, reset_settings
from config.__main__ import write_example
from config.lib.load_settings_conf import (
    ConfigValidationError,
    load_settings_conf,
    parse_bool,
    validate_settings,
)

def write_settings(directory, body):
    (directory / "settings.conf").write_text("[DEFAULT]\n" + body)
    return directory

@pytest.fixture(autouse=True)
def clear_settings(monkeypatch):
    monkeypatch.delenv("X_ACCESS_TOKEN", raising=False)
    reset_settings()
    yield
    reset_settings()

def test_defaults_are_applied(tmp_path):
    write_settings(tmp_path, "db_url = postgresql://postgres@localhost/stage_db\n")

    settings = get_settings(str(tmp_path))

    assert settings["db_url"] == "postgresql://postgres@localhost/stage_db"
    assert settings["order_volume_threshold"] == 100.0
    assert settings["metrics_volume_threshold"] == 1000.0
    assert settings["order_poll_interval"] == 10
    assert settings["dry_run"] is False
    assert settings["assets_url"] == "https://testnet.api.hashira.io/info/assets"

def test_settings_are_cached(tmp_path, monkeypatch):
    write_settings(tmp_path, "db_url = postgresql://localhost/db\n")
    monkeypatch.setenv("SWAPBOT_CONFIG_DIR", str(tmp_path))

    first = get_settings()
    assert get_settings() is first

    reset_settings()
    assert get_settings() is not first

def test_missing_file(tmp_path):
    with pytest.raises(SettingsError) as exc_info:
        get_settings(str(tmp_path))
    assert "Configuration Error" in str(exc_info.value)

def test_missing_db_url(tmp_path):
    write_settings(tmp_path, "dry_run = true\n")
    with pytest.raises(SettingsError) as exc_info:
        load_settings_conf(str(tmp_path))
    assert "db_url" in str(exc_info.value)

def test_invalid_values_are_listed(tmp_path):
    write_settings(
        tmp_path,
        "db_url = postgresql://localhost/db\n"
        "order_poll_interval = soon\n"
        "order_volume_threshold = -1\n"
        "dry_run = maybe\n"
    )
    with pytest.raises(SettingsError) as exc_info:
        validate_settings(load_settings_conf(str(tmp_path)))

    message = str(exc_info.value)
    assert "order_poll_interval (expected int)" in message
    assert "order_volume_threshold must not be negative" in message
    assert "dry_run (expected boolean)" in message

def test_validation_message_sections():
    errors = ConfigValidationError()
    assert not errors.has_errors()

    errors.missing.append("db_url")
    errors.invalid.append("dry_run (expected boolean)")

    assert errors.has_errors()
    assert errors.format_message() == (
        "Missing required settings:\n"
        "  - db_url\n"
        "\n"
        "Invalid setting values:\n"
        "  - dry_run (expected boolean)"
    )

def test_access_token_from_environment(tmp_path, monkeypatch):
    write_settings(tmp_path, "db_url = postgresql://localhost/db\n")
    monkeypatch.setenv("X_ACCESS_TOKEN", "secret")

    assert get_settings(str(tmp_path))["x_access_token"] == "secret"

@pytest.mark.parametrize("value,expected", [
    ("true", True), ("Yes", True), ("1", True),
    ("false", False), ("off", False), ("", False),
])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected

def test_write_example(tmp_path):
    path = write_example(tmp_path / "examples")
    text = path.read_text()

    assert text.startswith("[DEFAULT]")
    assert "db_url = " in text
    for key in config.DEFAULTS:
        assert f"{key} = " in text
