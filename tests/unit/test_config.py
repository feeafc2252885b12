"""Unit tests for drone configuration loading."""

import logging

import pytest

from pagenav.config import DroneConfig, configure_logging, load_config


def test_defaults():
    config = DroneConfig()
    assert config.browser == "chromium"
    assert config.headless is True
    assert config.viewport == {"width": 1280, "height": 800}
    assert config.default_timeout == 30000
    assert config.retries == 3
    assert config.base_url is None


def test_unsupported_browser():
    with pytest.raises(ValueError, match='Unsupported browser "opera"'):
        DroneConfig(browser="opera")


def test_load_yaml(tmp_path):
    path = tmp_path / "drone.yaml"
    path.write_text(
        "browser: firefox\n"
        "headless: false\n"
        "viewport:\n"
        "  width: 1920\n"
        "  height: 1080\n"
        "base_url: http://localhost:3000\n"
    )
    config = load_config(path)
    assert config.browser == "firefox"
    assert config.headless is False
    assert config.viewport == {"width": 1920, "height": 1080}
    assert config.base_url == "http://localhost:3000"
    assert config.retries == 3


def test_load_json(tmp_path):
    path = tmp_path / "drone.json"
    path.write_text('{"retries": 5, "default_timeout": 1000}')
    config = load_config(path)
    assert config.retries == 5
    assert config.default_timeout == 1000


def test_load_empty_file(tmp_path):
    path = tmp_path / "drone.yaml"
    path.write_text("")
    assert load_config(path) == DroneConfig()


def test_load_unknown_keys(tmp_path):
    path = tmp_path / "drone.yaml"
    path.write_text("browser: chromium\nscreenshots: true\n")
    with pytest.raises(ValueError, match="Unknown config keys .*: screenshots"):
        load_config(path)


def test_load_non_mapping(tmp_path):
    path = tmp_path / "drone.yaml"
    path.write_text("- chromium\n- firefox\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_merged_skips_none():
    config = DroneConfig(retries=5).merged(retries=None, headless=False, base_url="http://x")
    assert config.retries == 5
    assert config.headless is False
    assert config.base_url == "http://x"


def test_configure_logging_accepts_names(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging("debug")
    assert calls[0]["level"] == logging.DEBUG
    assert "%(levelname)s" in calls[0]["format"]
