"""Tests for settings, errors and logging setup."""

import pytest
import structlog

from carnet.config import DEFAULT_ENV_PREFIXES, get_settings
from carnet.errors import ConfigError, InvalidManifestError, NotFoundError, format_error
from carnet.logging_config import configure_logging


def test_defaults(monkeypatch):
    monkeypatch.delenv("CARNET_ENV_PREFIXES", raising=False)
    settings = get_settings()
    assert settings.env_prefixes == DEFAULT_ENV_PREFIXES
    assert settings.meta_tools == ["loadSkill", "loadSkillFile"]
    assert settings.manifest_path.endswith("carnet.manifest.json")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CARNET_MANIFEST_PATH", "/srv/manifest.json")
    monkeypatch.setenv("CARNET_VARIABLES", '{"COMPANY": "Acme"}')
    monkeypatch.setenv("CARNET_LOG_LEVEL", "debug")

    settings = get_settings()
    assert settings.manifest_path == "/srv/manifest.json"
    assert settings.variables == {"COMPANY": "Acme"}
    assert settings.log_level == "DEBUG"


def test_empty_prefixes_dropped():
    assert get_settings(env_prefixes=["", "APP_"]).env_prefixes == ["APP_"]


def test_invalid_settings_raise_config_error():
    with pytest.raises(ConfigError, match="Invalid configuration"):
        get_settings(log_level="loud")


def test_not_found_error_shape():
    error = NotFoundError("toolset", "search")
    assert str(error) == "Toolset not found: search"
    assert error.to_dict() == {
        "name": "NotFoundError",
        "message": "Toolset not found: search",
        "kind": "toolset",
        "entity_name": "search",
    }


def test_format_error():
    error = InvalidManifestError("Invalid manifest: boom", {"path": "/tmp/m.json", "errors": 2})
    assert format_error(error) == (
        "InvalidManifestError: Invalid manifest: boom\n"
        "  Context:\n"
        "    path: /tmp/m.json\n"
        "    errors: 2"
    )
    assert "  Name: x" in format_error(NotFoundError("skill", "x"))
    assert format_error(ValueError("plain")) == "ValueError: plain"


def test_configure_logging():
    configure_logging("warning", json=True)
    try:
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()


def test_malformed_json_setting_raises_config_error(monkeypatch):
    monkeypatch.setenv("CARNET_VARIABLES", "not-json")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        get_settings()


def test_configure_logging_unknown_level():
    with pytest.raises(ConfigError, match="Unknown log level: loud"):
        configure_logging("loud")
