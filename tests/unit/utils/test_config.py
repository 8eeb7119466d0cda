import pytest

from humidor.config import MonitorConfig, load_config


def test_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("HUMIDOR_MIN_REQUEST_INTERVAL", "2.5")
    monkeypatch.setenv("HUMIDOR_DEBUG", "yes")
    monkeypatch.setenv("HUMIDOR_CLOUD_BASE_URL", "https://example.test/api/")
    config = load_config()
    assert config.min_request_interval_seconds == 2.5
    assert config.DEBUG is True
    assert config.cloud_base_url == "https://example.test/api"


def test_invalid_number_in_environment(monkeypatch):
    monkeypatch.setenv("HUMIDOR_HUB_CALL_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="HUMIDOR_HUB_CALL_TIMEOUT"):
        MonitorConfig()


def test_rejects_inverted_default_thresholds():
    with pytest.raises(ValueError):
        MonitorConfig(default_min_temperature=75.0, default_max_temperature=70.0)


def test_as_dict_has_no_secrets():
    rendered = MonitorConfig().as_dict()
    assert "secret_store_path" not in rendered
    assert rendered["refresh_interval_seconds"] == 900


def test_history_window_must_be_positive(monkeypatch):
    monkeypatch.setenv("HUMIDOR_DEFAULT_HISTORY_WINDOW_HOURS", "0")
    with pytest.raises(ValueError, match="default_history_window_hours"):
        MonitorConfig()
