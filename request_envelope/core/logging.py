"""Loguru configuration for the service.

Formats:
- **console**: coloured lines with request context inline, for development
- **json**: one object per line for log collectors

The stdlib ``logging`` tree (uvicorn included) is bridged into Loguru by
``InterceptHandler``, so framework and application records share one sink.
Error handlers bind ``method``, ``path``, ``status_code`` and ``category``
as keyword context; both formats surface them.
"""

from __future__ import annotations

import inspect
import logging
import sys
from typing import Any, Final, Protocol, cast

import orjson
from loguru import logger

MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Request context rendered first, in this order, by the console format
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "method",
    "path",
    "status_code",
    "category",
)

UVICORN_LOGGERS: Final[tuple[str, ...]] = ("uvicorn", "uvicorn.error", "uvicorn.access")


class _LoggingState:
    """Whether ``setup_logging`` already ran in this process."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Sink settings read by ``setup_logging``."""

    @property
    def log_level(self) -> str: ...

    @property
    def log_formatter_type(self) -> str | None: ...


class SettingsProtocol(Protocol):
    """Settings shape accepted by ``setup_logging``."""

    @property
    def debug(self) -> bool: ...

    @property
    def log_config(self) -> LogConfigProtocol: ...


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _context_item(key: str, value: object) -> str:
    text = str(value)
    if len(text) > MAX_FIELD_VALUE_LENGTH:
        text = text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(text)}"


def _visible_context(extra: dict[str, Any]) -> list[str]:
    items = [
        _context_item(key, extra[key])
        for key in PRIORITY_FIELDS
        if extra.get(key) is not None
    ]
    items.extend(
        _context_item(key, value)
        for key, value in extra.items()
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None
    )
    return items


def format_console_with_context(record: dict[str, Any]) -> str:
    """Build the Loguru template for one console line.

    The returned string is itself formatted by Loguru, so the message and
    context values are brace-escaped and the traceback placeholder is only
    appended when an exception is attached.

    Args:
        record: Loguru record to format.

    Returns:
        str: Template consumed by Loguru.
    """
    segments = [
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
        "<level>{level: <8}</level>",
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
    ]
    if context := _visible_context(record.get("extra", {})):
        segments.append(" ".join(f"<dim>[{item}]</dim>" for item in context))
    segments.append(_escape(record.get("message", "")))

    template = " | ".join(segments) + "\n"
    if record.get("exception"):
        template += "{exception}"
    return template


def serialize_for_json(record: dict[str, Any]) -> str:
    """Render one record as a JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: The JSON object followed by a newline.
    """
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    entry.update(
        (key, value)
        for key, value in record.get("extra", {}).items()
        if not key.startswith("_")
    )

    if exc := record.get("exception"):
        entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return orjson.dumps(entry, default=str).decode() + "\n"


class InterceptHandler(logging.Handler):
    """Re-emit stdlib log records through Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past the logging module so the caller's location is reported
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink(message: object) -> None:
    sys.stdout.write(serialize_for_json(message.record))  # type: ignore[attr-defined]
    sys.stdout.flush()


def setup_logging(settings: SettingsProtocol) -> None:
    """Install the Loguru sink and bridge stdlib logging into it.

    Only the first call in a process has an effect.

    Args:
        settings: Settings providing ``debug`` and ``log_config``.
    """
    if _state.configured:
        return

    level = settings.log_config.log_level
    formatter_type = settings.log_config.log_formatter_type or "console"

    logger.remove()
    if formatter_type == "json":
        logger.add(_json_sink, level=level, enqueue=True, diagnose=False, backtrace=False)
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in UVICORN_LOGGERS:
        bridged = logging.getLogger(name)
        bridged.handlers = [InterceptHandler()]
        bridged.propagate = False

    _state.configured = True
    logger.info("Logging configured with {} formatter", formatter_type, log_level=level)
