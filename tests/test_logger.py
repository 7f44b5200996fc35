"""
Tests for logging setup.
"""

import logging

import structlog

from utilities.logger import setup_logging


def test_setup_logging_with_file(tmp_path):
    """A log file and its parent directories are created."""
    log_file = tmp_path / "logs" / "crud.log"

    try:
        setup_logging(log_level="debug", log_format="console", log_file=log_file)

        assert log_file.exists()
        assert any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_file)
            for handler in logging.getLogger().handlers
        )
    finally:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()
        structlog.reset_defaults()


def test_setup_logging_json():
    try:
        setup_logging(log_level="INFO", log_format="json")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()
