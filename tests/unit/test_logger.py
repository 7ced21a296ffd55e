"""Unit tests for structured logging."""

import io
from datetime import datetime

import orjson
import pytest

from rsml.utils.logger import (
    JsonFormatter,
    LogLevel,
    LogRecord,
    Logger,
    StreamHandler,
    TextFormatter,
    configure_logging,
    get_logger,
)


def make_record(**kwargs) -> LogRecord:
    defaults = dict(
        level=LogLevel.INFO,
        message="Compiled markup",
        timestamp=datetime(2026, 10, 18, 10, 30, 45),
        logger_name="rsml.cli",
    )
    defaults.update(kwargs)
    return LogRecord(**defaults)


class TestLogLevel:

    def test_parse(self):
        assert LogLevel.parse("info") is LogLevel.INFO
        assert LogLevel.parse("WARNING") is LogLevel.WARNING
        assert LogLevel.parse(10) is LogLevel.DEBUG
        assert LogLevel.parse(LogLevel.ERROR) is LogLevel.ERROR

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown log level: loud"):
            LogLevel.parse("loud")


class TestFormatters:
    """Tests for text and JSON output."""

    def test_text(self):
        record = make_record(context={"file": "counter.rsml", "size": 412})
        assert TextFormatter().format(record) == (
            "2026-10-18 10:30:45 [INFO] rsml.cli: Compiled markup file=counter.rsml size=412"
        )

    def test_text_colors(self):
        output = TextFormatter(colors=True).format(make_record(level=LogLevel.WARNING))
        assert "\033[33mWARNING\033[0m" in output

    def test_text_includes_traceback_for_errors(self):
        try:
            raise ValueError("bad markup")
        except ValueError as e:
            record = make_record(level=LogLevel.ERROR, exception=e)

        output = TextFormatter().format(record)
        assert output.splitlines()[0].endswith("rsml.cli: Compiled markup")
        assert "ValueError: bad markup" in output

    def test_json(self):
        record = make_record(context={"path": object()}, exception=KeyError("x"))
        data = orjson.loads(JsonFormatter().format(record))

        assert data["timestamp"] == "2026-10-18T10:30:45"
        assert data["level"] == "INFO"
        assert data["logger"] == "rsml.cli"
        assert data["message"] == "Compiled markup"
        assert data["context"]["path"].startswith("<object object")
        assert data["exception"] == {"type": "KeyError", "message": "'x'"}

    def test_json_is_single_line(self):
        assert "\n" not in JsonFormatter().format(make_record())


class TestLogger:
    """Tests for level filtering and context."""

    def test_levels(self):
        stream = io.StringIO()
        logger = Logger("test", handlers=[StreamHandler(stream, level=LogLevel.INFO)])

        logger.debug("hidden")
        logger.info("shown")
        logger.error("failed")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert "[INFO] test: shown" in lines[0]
        assert "[ERROR] test: failed" in lines[1]

    def test_logger_level(self):
        stream = io.StringIO()
        logger = Logger("test", level=LogLevel.ERROR, handlers=[StreamHandler(stream)])
        logger.warning("hidden")
        assert stream.getvalue() == ""

    def test_with_context(self):
        stream = io.StringIO()
        logger = Logger("test", handlers=[StreamHandler(stream)])

        file_logger = logger.with_context(file="a.rsml")
        file_logger.info("checked", result="pass")
        logger.info("plain")

        lines = stream.getvalue().splitlines()
        assert lines[0].endswith("checked file=a.rsml result=pass")
        assert lines[1].endswith("plain")

    def test_exception(self):
        stream = io.StringIO()
        logger = Logger("test", handlers=[StreamHandler(stream)])
        try:
            {}["missing"]
        except KeyError:
            logger.exception("lookup failed")
        assert "KeyError: 'missing'" in stream.getvalue()

    def test_broken_stream_is_ignored(self):
        stream = io.StringIO()
        stream.close()
        logger = Logger("test", handlers=[StreamHandler(stream)])
        logger.error("nowhere to go")


class TestConfigureLogging:
    """Tests for the shared handlers."""

    def test_get_logger_is_cached(self):
        assert get_logger("rsml.test") is get_logger("rsml.test")

    def test_existing_loggers_follow_configuration(self):
        logger = get_logger("rsml.test")
        stream = io.StringIO()

        configure_logging(level="info", stream=stream)
        logger.info("first")
        configure_logging(level="error", stream=stream)
        logger.info("second")

        assert "first" in stream.getvalue()
        assert "second" not in stream.getvalue()

    def test_json_format(self):
        stream = io.StringIO()
        configure_logging(level="debug", format="json", stream=stream)
        get_logger("rsml.test").debug("hello", count=2)

        data = orjson.loads(stream.getvalue())
        assert data["message"] == "hello"
        assert data["context"] == {"count": 2}

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            configure_logging(format="xml")

    def test_default_stream_is_stderr(self, capsys):
        configure_logging(level="info", colors=False)
        get_logger("rsml.test").info("to stderr")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[INFO] rsml.test: to stderr" in captured.err

    def test_returns_root_logger(self):
        assert configure_logging().name == "rsml"
