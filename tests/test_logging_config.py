"""Tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from config.logging_config import ROOT_LOGGER, JSONFormatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = logger.handlers[:], logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="automation.poller", level=logging.INFO, pathname=__file__,
        lineno=10, msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "automation.poller"
        assert entry["message"] == "hello"
        assert entry["timestamp"].endswith("Z")

    def test_job_extras(self):
        entry = json.loads(JSONFormatter().format(
            _record(job_url="/api/v2/jobs/42/", template_id=7, status="running")
        ))
        assert entry["job_url"] == "/api/v2/jobs/42/"
        assert entry["template_id"] == 7
        assert entry["status"] == "running"
        assert "correlation_id" not in entry

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestConfigureLogging:

    def test_json_console_handler(self):
        logger = configure_logging(log_level="debug", log_format="json", log_file="")
        assert logger.name == "automation"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_text_format(self):
        logger = configure_logging(log_format="text", log_file="")
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_env_defaults(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.delenv("LOG_FILE", raising=False)
        logger = configure_logging()
        assert logger.level == logging.WARNING

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "automation.log"
        logger = configure_logging(log_file=str(log_file))
        assert len(logger.handlers) == 2
        logger.warning("written")
        for handler in logger.handlers:
            handler.flush()
        assert "written" in log_file.read_text()
