"""Logging setup and the audit trail."""

from infrastructure.logging.audit import AuditLogger, NullAuditLogger
from infrastructure.logging.configure import configure_logging

__all__ = ["AuditLogger", "NullAuditLogger", "configure_logging"]
