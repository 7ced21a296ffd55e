"""
RSML Logger
===========

Structured logging for the compiler front-ends (entry point and CLI).
The tokenizer, parser and generator never log; failures there surface as
exceptions.
"""

from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, TextIO, Union

import orjson


class LogLevel(IntEnum):
    """Log levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Accept a level name ("info") or number."""
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value}") from None
        return cls(value)


@dataclass
class LogRecord:
    """
    Structured log record.

    Attributes:
        level: Log level
        message: Log message
        timestamp: Record timestamp
        context: Additional key/value context (file names, hashes, ...)
        exception: Exception info
    """

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "rsml"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
        }

        if self.context:
            data["context"] = self.context

        if self.exception:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }

        return data


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2026-10-18 10:30:45 [INFO] rsml.cli: Compiled markup file=counter.rsml
    """

    COLORS = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
        colors: bool = False,
    ):
        self.format_string = format_string or "{timestamp} [{level}] {logger}: {message}"
        self.date_format = date_format
        self.colors = colors

    def format(self, record: LogRecord) -> str:
        level = record.level.name
        if self.colors:
            level = f"{self.COLORS.get(record.level, '')}{level}{self.RESET}"

        message = record.message
        if record.context:
            pairs = " ".join(f"{k}={v}" for k, v in record.context.items())
            message = f"{message} {pairs}"

        output = self.format_string.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=level,
            message=message,
            logger=record.logger_name,
        )

        if record.exception and record.level >= LogLevel.ERROR:
            output += "\n" + "".join(
                traceback.format_exception(
                    type(record.exception),
                    record.exception,
                    record.exception.__traceback__,
                )
            ).rstrip()

        return output


class JsonFormatter(LogFormatter):
    """
    JSON formatter for structured logging, one object per line.

    Example output:
        {"timestamp":"2026-10-18T10:30:45","level":"INFO","message":"Compiled markup"}
    """

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def format(self, record: LogRecord) -> str:
        option = orjson.OPT_INDENT_2 if self.pretty else 0
        return orjson.dumps(record.to_dict(), default=str, option=option).decode("utf-8")


class LogHandler:
    """Base log handler."""

    def __init__(
        self,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level >= self.level:
            self.emit(record)

    def emit(self, record: LogRecord) -> None:
        raise NotImplementedError


class StreamHandler(LogHandler):
    """
    Stream output handler.

    Without an explicit stream, writes to whatever sys.stderr is at the
    time of the call.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        super().__init__(formatter, level)
        self.stream = stream

    def emit(self, record: LogRecord) -> None:
        stream = self.stream or sys.stderr
        stream.write(self.formatter.format(record) + "\n")
        stream.flush()


class Logger:
    """
    Structured logger.

    Example:
        logger = get_logger("rsml.cli")
        logger.info("Compiled markup", file="counter.rsml", size=412)

        # With context
        file_logger = logger.with_context(file="counter.rsml")
        file_logger.warning("Markup failed to compile")
    """

    def __init__(
        self,
        name: str = "rsml",
        level: LogLevel = LogLevel.DEBUG,
        handlers: Optional[List[LogHandler]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers = handlers if handlers is not None else []
        self._context: Dict[str, Any] = {}

    def add_handler(self, handler: LogHandler) -> "Logger":
        self._handlers.append(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Create a logger sharing handlers, with extra context."""
        new_logger = Logger(name=self.name, level=self.level, handlers=self._handlers)
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            context={**self._context, **context},
            exception=exception,
            logger_name=self.name,
        )

        for handler in self._handlers:
            try:
                handler.handle(record)
            except (OSError, ValueError):
                # closed or broken stream
                pass

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)

    def exception(self, message: str, **context: Any) -> None:
        """Log current exception."""
        self._log(LogLevel.ERROR, message, sys.exc_info()[1], **context)


# Handlers shared by every logger from get_logger(); configure_logging
# replaces the contents in place so existing loggers pick up the change.
_handlers: List[LogHandler] = [StreamHandler(level=LogLevel.WARNING)]
_loggers: Dict[str, Logger] = {}


def get_logger(name: str = "rsml") -> Logger:
    """Get or create a logger sharing the global handlers."""
    if name not in _loggers:
        _loggers[name] = Logger(name=name, handlers=_handlers)
    return _loggers[name]


def configure_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    format: str = "text",
    stream: Optional[TextIO] = None,
    colors: Optional[bool] = None,
) -> Logger:
    """
    Configure output for all RSML loggers.

    Args:
        level: Minimum level written
        format: Output format ("text" or "json")
        stream: Output stream (stderr by default)
        colors: ANSI colors for text output; defaults to on for a TTY

    Returns:
        The root "rsml" logger
    """
    if format not in ("text", "json"):
        raise ValueError(f"Unknown log format: {format}")

    if format == "json":
        formatter: LogFormatter = JsonFormatter()
    else:
        if colors is None:
            target = stream or sys.stderr
            colors = hasattr(target, "isatty") and target.isatty()
        formatter = TextFormatter(colors=colors)

    _handlers[:] = [StreamHandler(stream=stream, formatter=formatter, level=LogLevel.parse(level))]
    return get_logger("rsml")
