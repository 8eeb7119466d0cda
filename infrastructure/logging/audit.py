import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict


class AuditLogger:
    """Append-only JSON-lines record of credential and hub-automation events.

    Entries never carry secrets: callers pass identifiers (user id, humidor id,
    hub object names), not tokens or passwords.
    """

    def __init__(self, log_path: str, level: str = "INFO") -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("humidor.audit")
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        resolved = str(self.log_path.resolve())
        if not any(
            isinstance(handler, RotatingFileHandler) and handler.baseFilename == resolved
            for handler in self.logger.handlers
        ):
            handler = RotatingFileHandler(
                filename=str(self.log_path),
                maxBytes=5 * 1024 * 1024,  # 5 MB
                backupCount=10,
                encoding="utf-8",
                delay=True,
            )
            handler.setFormatter(
                logging.Formatter(fmt="%(asctime)sZ | %(levelname)s | %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            )
            self.logger.addHandler(handler)

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        payload: Dict[str, Any] = {
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.info(json.dumps(payload, default=str))


class NullAuditLogger:
    """Drop-in replacement used when no audit trail is configured."""

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        return None
