import logging
from logging.handlers import RotatingFileHandler

import pytest

from humidor.config import MonitorConfig
from infrastructure.logging import configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if getattr(handler, "_humidor_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _installed(root):
    return [h for h in root.handlers if getattr(h, "_humidor_handler", False)]


def test_repeated_calls_replace_the_handler(root_logger):
    configure_logging(MonitorConfig(log_level="WARNING"))
    configure_logging(MonitorConfig(log_level="WARNING"))

    assert len(_installed(root_logger)) == 1
    assert root_logger.level == logging.WARNING


def test_log_file_uses_rotating_handler(root_logger, tmp_path):
    log_file = tmp_path / "logs" / "monitor.log"
    configure_logging(MonitorConfig(log_file=str(log_file)))

    (handler,) = _installed(root_logger)
    assert isinstance(handler, RotatingFileHandler)
    assert log_file.parent.is_dir()


def test_debug_overrides_level(root_logger):
    configure_logging(MonitorConfig(log_level="ERROR", DEBUG=True))
    assert root_logger.level == logging.DEBUG
