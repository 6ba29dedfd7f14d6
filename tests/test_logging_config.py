"""Tests for the kurva logger setup."""

import io
import logging
import sys

import pytest

from kurva_pkg.logging_config import StructuredFormatter, get_logger, setup_logging


@pytest.fixture
def kurva_logger():
    root = logging.getLogger("kurva")
    yield root
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_writes_to_given_stream(self, kurva_logger):
        stream = io.StringIO()
        setup_logging("DEBUG", stream=stream, timestamps=False)
        get_logger("parser").debug("compiled 3 tokens")
        assert stream.getvalue() == "[DEBUG] kurva.parser: compiled 3 tokens\n"

    def test_level_filters(self, kurva_logger):
        stream = io.StringIO()
        setup_logging(logging.WARNING, stream=stream, timestamps=False)
        get_logger("calculator").info("hidden")
        get_logger("calculator").warning("Plot aborted")
        assert stream.getvalue() == "[WARNING] kurva.calculator: Plot aborted\n"

    def test_unknown_level_name_falls_back_to_info(self, kurva_logger):
        assert setup_logging("chatty", stream=io.StringIO()).level == logging.INFO

    def test_repeated_setup_keeps_one_handler(self, kurva_logger):
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())
        assert len(logger.handlers) == 1
        assert logger.propagate is False


class TestStructuredFormatter:
    def make_record(self):
        return logging.LogRecord("kurva.api", logging.ERROR, __file__, 1, "bad input", None, None)

    def test_timestamp_prefix(self):
        line = StructuredFormatter().format(self.make_record())
        assert line.endswith(" [ERROR] kurva.api: bad input")
        assert not line.startswith("[")

    def test_exception_text_appended(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = self.make_record()
            record.exc_info = sys.exc_info()
        line = StructuredFormatter(timestamps=False).format(record)
        assert line.startswith("[ERROR] kurva.api: bad input\n")
        assert "ValueError: boom" in line
