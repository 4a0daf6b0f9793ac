"""
Structured Logging
==================

Logging setup for the scaffolder.

Console records are short and icon-prefixed; records written to a log file
are JSON lines that also carry the stage the record was emitted from.
"""

import contextvars
import json
import logging
import sys
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

PACKAGE_LOGGER = "create_march_app"

# Stage/feature labels attached to every record emitted inside log_context()
_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("march_log_context")

# Record "status" values understood by ConsoleFormatter
STATUS_ICONS = {
    "step": "🔧",
    "success": "✅",
    "package": "📦",
    "config": "📝",
}

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"

EXTRA_FIELDS = ("duration_ms", "status", "error_code", "component")


def _describe_exc_info(exc_info) -> dict[str, Any]:
    exc_type, exc_value, _ = exc_info
    return {
        "type": exc_type.__name__ if exc_type else None,
        "message": str(exc_value) if exc_value else None,
        "traceback": "".join(traceback.format_exception(*exc_info)),
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, used for --log-file output."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.filename}:{record.lineno}",
        }
        context = get_log_context()
        if context:
            entry["context"] = context
        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exception"] = _describe_exc_info(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Terminal output.

    INFO records carrying a ``status`` extra are printed with an icon
    instead of the level name.
    """

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            text = f"{text} ({duration:.1f}ms)"

        icon = STATUS_ICONS.get(getattr(record, "status", ""))
        if icon and record.levelno == logging.INFO:
            return f"{icon} {text}"

        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{LEVEL_COLORS.get(record.levelno, RESET)}{level}{RESET}"
        return f"{level} {text}"


def configure_logging(
    level: int | str = logging.INFO,
    structured: bool = False,
    log_file: str | None = None,
) -> None:
    """
    (Re)configure the package logger.

    Args:
        level: Minimum log level
        structured: JSON lines on the console instead of icon output
        log_file: Also write JSON lines to this file
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.propagate = False
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter() if structured else ConsoleFormatter(sys.stdout.isatty()))
    package_logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        package_logger.addHandler(file_handler)


def _log_status(logger: logging.Logger, status: str, message: str, args: tuple[Any, ...]) -> None:
    logger.info(message, *args, extra={"status": status}, stacklevel=3)


def log_step(logger: logging.Logger, message: str, *args: Any) -> None:
    _log_status(logger, "step", message, args)


def log_success(logger: logging.Logger, message: str, *args: Any) -> None:
    _log_status(logger, "success", message, args)


def log_package(logger: logging.Logger, message: str, *args: Any) -> None:
    _log_status(logger, "package", message, args)


def log_config(logger: logging.Logger, message: str, *args: Any) -> None:
    _log_status(logger, "config", message, args)


def get_log_context() -> dict[str, Any]:
    """Copy of the labels active in the current task."""
    return dict(_log_context.get({}))


@contextmanager
def log_context(**labels: Any) -> Iterator[dict[str, Any]]:
    """
    Attach labels to every record emitted inside the block.

    Usage:
        with log_context(stage="Frontend setup"):
            logger.info("Creating app")
    """
    merged = {**get_log_context(), **labels}
    token = _log_context.set(merged)
    try:
        yield merged
    finally:
        _log_context.reset(token)


class Timer:
    """
    Measures a block in milliseconds.

    Usage:
        with Timer("frontend") as timer:
            await stage.run()
        logger.debug("done", extra={"duration_ms": timer.duration_ms})
    """

    def __init__(self, name: str = "operation"):
        self.name = name
        self.duration_ms = 0.0
        self._started = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc: object) -> None:
        self.duration_ms = (time.perf_counter() - self._started) * 1000


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **extra: Any,
) -> None:
    """
    Log an exception with its error code.

    The traceback is attached only at DEBUG verbosity.
    """
    from .exceptions import get_error_code

    verbose = logger.isEnabledFor(logging.DEBUG)
    logger.log(
        level,
        message,
        exc_info=(type(exc), exc, exc.__traceback__) if verbose else None,
        extra={"error_code": get_error_code(exc), **extra},
    )
