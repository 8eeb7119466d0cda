"""
Configuration for the humidor monitoring core
==============================================
Runtime settings for the cloud sensor session, hub automation, stability
scoring and alerting. Every field defaults from a ``HUMIDOR_*`` environment
variable so deployments can tune behaviour without code changes.
"""

import os
from dataclasses import dataclass, field
from typing import Any


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class MonitorConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("HUMIDOR_ENV", "development"))
    log_level: str = field(default_factory=lambda: os.getenv("HUMIDOR_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("HUMIDOR_LOG_FILE", ""))
    audit_log_path: str = field(default_factory=lambda: os.getenv("HUMIDOR_AUDIT_LOG_PATH", "logs/audit.log"))
    secret_store_path: str = field(
        default_factory=lambda: os.getenv("HUMIDOR_SECRET_STORE_PATH", "var/secrets.json")
    )

    # Cloud sensor API
    cloud_base_url: str = field(
        default_factory=lambda: os.getenv("HUMIDOR_CLOUD_BASE_URL", "https://api.sensorpush.com/api/v1")
    )
    http_timeout_seconds: float = field(default_factory=lambda: _env_float("HUMIDOR_HTTP_TIMEOUT", 10.0))
    # Minimum spacing between two outbound cloud requests
    min_request_interval_seconds: float = field(
        default_factory=lambda: _env_float("HUMIDOR_MIN_REQUEST_INTERVAL", 1.0)
    )
    current_reading_lookback_minutes: int = field(
        default_factory=lambda: _env_int("HUMIDOR_CURRENT_READING_LOOKBACK_MINUTES", 5)
    )

    # Home-automation hub
    hub_call_timeout_seconds: float = field(default_factory=lambda: _env_float("HUMIDOR_HUB_CALL_TIMEOUT", 10.0))
    automation_sentinel_value: float = field(
        default_factory=lambda: _env_float("HUMIDOR_AUTOMATION_SENTINEL_VALUE", 1.0)
    )
    automation_immediate_check: bool = field(
        default_factory=lambda: _env_bool("HUMIDOR_AUTOMATION_IMMEDIATE_CHECK", True)
    )

    # Stability scoring: a standard deviation equal to the scale maps to 0.0
    temperature_stability_scale: float = field(
        default_factory=lambda: _env_float("HUMIDOR_TEMPERATURE_STABILITY_SCALE", 5.0)
    )
    humidity_stability_scale: float = field(
        default_factory=lambda: _env_float("HUMIDOR_HUMIDITY_STABILITY_SCALE", 10.0)
    )

    # Default thresholds applied to humidors without explicit configuration
    default_min_temperature: float = field(default_factory=lambda: _env_float("HUMIDOR_DEFAULT_MIN_TEMP", 65.0))
    default_max_temperature: float = field(default_factory=lambda: _env_float("HUMIDOR_DEFAULT_MAX_TEMP", 72.0))
    default_min_humidity: float = field(default_factory=lambda: _env_float("HUMIDOR_DEFAULT_MIN_HUMIDITY", 62.0))
    default_max_humidity: float = field(default_factory=lambda: _env_float("HUMIDOR_DEFAULT_MAX_HUMIDITY", 75.0))
    status_warning_margin: float = field(default_factory=lambda: _env_float("HUMIDOR_STATUS_WARNING_MARGIN", 1.0))

    # Refresh cadence (caller-driven; these only feed next_refresh_delay)
    refresh_interval_seconds: int = field(default_factory=lambda: _env_int("HUMIDOR_REFRESH_INTERVAL", 900))
    refresh_max_failed_attempts: int = field(
        default_factory=lambda: _env_int("HUMIDOR_REFRESH_MAX_FAILED_ATTEMPTS", 3)
    )
    refresh_backoff_cap_seconds: int = field(
        default_factory=lambda: _env_int("HUMIDOR_REFRESH_BACKOFF_CAP", 6 * 3600)
    )
    # History kept for sensors that are only polled for their current reading
    default_history_window_hours: float = field(
        default_factory=lambda: _env_float("HUMIDOR_DEFAULT_HISTORY_WINDOW_HOURS", 24.0)
    )

    DEBUG: bool = field(default_factory=lambda: _env_bool("HUMIDOR_DEBUG", False))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.min_request_interval_seconds < 0:
            raise ValueError("min_request_interval_seconds must not be negative")
        if self.http_timeout_seconds <= 0 or self.hub_call_timeout_seconds <= 0:
            raise ValueError("timeouts must be positive")
        if self.temperature_stability_scale <= 0 or self.humidity_stability_scale <= 0:
            raise ValueError("stability scales must be positive")
        if self.default_history_window_hours <= 0:
            raise ValueError("default_history_window_hours must be positive")
        if self.default_min_temperature >= self.default_max_temperature:
            raise ValueError("default_min_temperature must be below default_max_temperature")
        if self.default_min_humidity >= self.default_max_humidity:
            raise ValueError("default_min_humidity must be below default_max_humidity")
        self.cloud_base_url = self.cloud_base_url.rstrip("/")

    def as_dict(self) -> dict[str, Any]:
        """Render non-secret configuration values, e.g. for diagnostics."""
        return {
            "environment": self.environment,
            "cloud_base_url": self.cloud_base_url,
            "http_timeout_seconds": self.http_timeout_seconds,
            "min_request_interval_seconds": self.min_request_interval_seconds,
            "hub_call_timeout_seconds": self.hub_call_timeout_seconds,
            "temperature_stability_scale": self.temperature_stability_scale,
            "humidity_stability_scale": self.humidity_stability_scale,
            "refresh_interval_seconds": self.refresh_interval_seconds,
            "log_level": self.log_level,
        }


def load_config() -> MonitorConfig:
    """Helper for callers to load and validate configuration."""
    return MonitorConfig()
