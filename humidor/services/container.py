"""
Monitor Container
=================
Composition root of the monitoring core. Builds the cloud session, sensor
backends, reading cache, analyzer, alert engine, automation builder and
monitoring service from one ``MonitorConfig``. Each container owns its own
instances; nothing is shared through module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import requests

from humidor.config import MonitorConfig
from humidor.hardware.adapters.sensors import CloudSensorBackend, HubSensorBackend
from humidor.hardware.hub.protocol import HubHomeManager
from humidor.services.alert_engine import AlertEngine
from humidor.services.automation_builder import AutomationBuilder
from humidor.services.cloud.auth_session import CloudAuthSession
from humidor.services.monitoring_service import MonitoringService
from humidor.services.reading_cache import ReadingCache
from humidor.services.stability_analyzer import StabilityAnalyzer
from infrastructure.logging.audit import AuditLogger
from infrastructure.secrets import JsonFileSecretStore, SecretStore

logger = logging.getLogger(__name__)


@dataclass
class MonitorContainer:
    """Aggregate the monitoring core's collaborators. One per process or per test."""

    config: MonitorConfig
    secret_store: SecretStore
    audit_logger: AuditLogger
    session: CloudAuthSession
    cloud_backend: CloudSensorBackend
    hub_backend: Optional[HubSensorBackend]
    cache: ReadingCache
    analyzer: StabilityAnalyzer
    alert_engine: AlertEngine
    automation_builder: Optional[AutomationBuilder]
    monitoring: MonitoringService

    @classmethod
    def build(
        cls,
        config: MonitorConfig,
        *,
        secret_store: SecretStore | None = None,
        hub_manager: HubHomeManager | None = None,
        http_session: requests.Session | None = None,
    ) -> "MonitorContainer":
        """Construct the container with all dependencies.

        Args:
            config: Monitor configuration
            secret_store: Token persistence; defaults to a JSON file at ``config.secret_store_path``
            hub_manager: Home-automation hub, when one is available on this host
            http_session: requests session shared by cloud calls
        """
        logger.info("Building MonitorContainer...")
        secret_store = secret_store or JsonFileSecretStore(config.secret_store_path)
        audit_logger = AuditLogger(config.audit_log_path)

        session = CloudAuthSession(config, secret_store, http_session=http_session, audit_logger=audit_logger)
        session.restore()
        cloud_backend = CloudSensorBackend(session, lookback_minutes=config.current_reading_lookback_minutes)

        cache = ReadingCache(default_window=timedelta(hours=config.default_history_window_hours))
        analyzer = StabilityAnalyzer(config.temperature_stability_scale, config.humidity_stability_scale)
        alert_engine = AlertEngine()

        hub_backend = None
        automation_builder = None
        if hub_manager is not None:
            hub_backend = HubSensorBackend(hub_manager, call_timeout=config.hub_call_timeout_seconds)
            automation_builder = AutomationBuilder(
                hub_backend,
                alert_engine,
                sentinel_value=config.automation_sentinel_value,
                immediate_check=config.automation_immediate_check,
                audit_logger=audit_logger,
            )

        monitoring = MonitoringService(
            config,
            cache,
            analyzer,
            alert_engine,
            cloud_backend=cloud_backend,
            hub_backend=hub_backend,
        )

        logger.info("MonitorContainer built (hub %s).", "available" if hub_backend else "not available")
        return cls(
            config=config,
            secret_store=secret_store,
            audit_logger=audit_logger,
            session=session,
            cloud_backend=cloud_backend,
            hub_backend=hub_backend,
            cache=cache,
            analyzer=analyzer,
            alert_engine=alert_engine,
            automation_builder=automation_builder,
            monitoring=monitoring,
        )

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.session.http.close()
        logger.info("MonitorContainer shutdown complete.")
