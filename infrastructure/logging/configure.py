"""Process-wide logging setup for the monitor CLI and embedding applications."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from humidor.config import MonitorConfig

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: MonitorConfig) -> None:
    """Attach a console or rotating-file handler to the root logger.

    Safe to call more than once; handlers installed by a previous call are
    replaced rather than duplicated.
    """
    level = logging.DEBUG if config.DEBUG else getattr(logging, config.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_humidor_handler", False):
            root.removeHandler(handler)
            handler.close()

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            filename=config.log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._humidor_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # urllib3 is chatty at DEBUG; keep it at WARNING unless debugging
    if not config.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
