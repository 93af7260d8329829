"""Tests for logging configuration."""

import json
import logging

import pytest

from keepup.logging_config import StructuredFormatter, setup_logging


class TestSetupLogging:
    """Test setup_logging."""

    def teardown_method(self):
        setup_logging()

    def test_level_is_applied(self):
        logger = setup_logging(level="DEBUG")
        assert logger.name == "keepup"
        assert logger.level == logging.DEBUG

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging()
        logger = setup_logging(level="WARNING")
        assert len(logger.handlers) == 1

    def test_level_is_case_insensitive(self):
        logger = setup_logging(level="warning")
        assert logger.level == logging.WARNING

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="verbose")

    def test_structured_formatter_is_used(self):
        logger = setup_logging(structured=True)
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)


def test_structured_formatter_outputs_json():
    record = logging.LogRecord("keepup", logging.WARNING, __file__, 1, "cache %s", ("miss",), None)
    entry = json.loads(StructuredFormatter().format(record))
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "keepup"
    assert entry["message"] == "cache miss"
