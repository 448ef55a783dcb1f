"""
Structured logging for Starfall handlers.

Every handler invocation runs inside a `LogContext` that names the player
and the handler; each record emitted while it is active carries those
fields plus a short correlation id, so all remote calls made for one
request can be grouped together.

Records are handed to a bounded queue on the calling task and written by a
background listener thread. Output goes to stdout (JSON when `LOG_JSON` is
set or in production, plain or coloured text otherwise) and, when
`LOG_TO_FILE` is on, to a daily rotated JSON file under `LOGS_DIR`.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from starfall.core.config.config import Config


CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_FILE_NAME = "starfall_daily.json.log"
QUEUE_MAX_SIZE = 10_000

_request_context: ContextVar[Dict[str, Any]] = ContextVar("request_context", default={})
_listener: Optional[QueueListener] = None


def _log_level() -> int:
    name = Config.LOG_LEVEL if isinstance(Config.LOG_LEVEL, str) else "INFO"
    return getattr(logging, name.upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the active request context onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        # Records are enriched on the emitting task; the listener thread has no context.
        if getattr(record, "_starfall_context", False):
            return True
        record._starfall_context = True

        context = _request_context.get({})
        correlation_id = context.get("correlation_id") or context.get("request_id") or "N/A"

        record.player_id = context.get("player_id", "N/A")
        record.handler = context.get("handler", "N/A")
        record.correlation_id = correlation_id
        record.request_id = context.get("request_id", correlation_id)
        record.component = context.get("component") or record.name.split(".", 1)[0]
        record.operation = context.get("operation") or getattr(record, "operation", "N/A")
        return True


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name for terminals."""

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        color = self.COLORS.get(original)
        if color:
            record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Request context fields sit at the top level; anything passed through
    `extra=` that is not a standard LogRecord attribute lands under "extra".
    """

    RECORD_ATTRS = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", None, None))
    ) | {"message", "asctime", "taskName"}

    CONTEXT_ATTRS = (
        "player_id",
        "handler",
        "correlation_id",
        "request_id",
        "component",
        "operation",
    )

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in self.CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value not in (None, "N/A"):
                payload[attr] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.RECORD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, ensure_ascii=False, default=str)


# ============================================================================
# Queue pipeline
# ============================================================================


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("Starfall log queue full; record dropped.\n")


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if _use_json():
        handler.setFormatter(JSONFormatter())
    elif Config.LOG_COLORS and sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(level: int) -> logging.Handler:
    logs_dir = Path(Config.LOGS_DIR).resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(logs_dir / DAILY_FILE_NAME),
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Install the queue handler on the root logger. Safe to call twice."""
    global _listener

    root = logging.getLogger()
    if getattr(root, "_starfall_logging_initialized", False):
        return

    level = _log_level()
    root.setLevel(level)
    root.handlers.clear()

    outputs: List[logging.Handler] = [_console_handler(level)]
    if Config.LOG_TO_FILE:
        outputs.append(_file_handler(level))
    for output in outputs:
        output.addFilter(ContextFilter())

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _listener = QueueListener(log_queue, *outputs, respect_handler_level=True)
    _listener.start()

    queue_handler = _DroppingQueueHandler(log_queue)
    queue_handler.setLevel(level)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    root._starfall_logging_initialized = True  # type: ignore[attr-defined]
    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(level),
            "json": _use_json(),
            "file": bool(Config.LOG_TO_FILE),
        },
    )


def shutdown_logging() -> None:
    """Drain the queue and close every output."""
    global _listener

    root = logging.getLogger()
    if not getattr(root, "_starfall_logging_initialized", False):
        return

    if _listener is not None:
        _listener.stop()
        _listener = None

    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    root._starfall_logging_initialized = False  # type: ignore[attr-defined]


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Bind a player and handler to every record logged inside the block.

    Works as a sync or async context manager:

    >>> async with LogContext(player_id="ABC123", handler="killedEnemyGroup"):
    ...     await service.resolve_combat(...)
    """

    def __init__(
        self,
        player_id: Optional[str] = None,
        handler: Optional[str] = None,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        correlation = correlation_id or request_id or uuid.uuid4().hex[:8]
        self.context: Dict[str, Any] = {
            "player_id": str(player_id) if player_id is not None else "N/A",
            "handler": handler or "N/A",
            "component": component,
            "operation": operation,
            "correlation_id": correlation,
            "request_id": request_id or correlation,
            **extra,
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _request_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _request_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(**fields: Any) -> None:
    """Merge fields into the current context; None values are ignored."""
    current = dict(_request_context.get({}))
    current.update({key: value for key, value in fields.items() if value is not None})
    if fields.get("request_id") and "correlation_id" not in current:
        current["correlation_id"] = fields["request_id"]
    _request_context.set(current)


def get_log_context() -> Dict[str, Any]:
    return dict(_request_context.get({}))


def clear_log_context() -> None:
    _request_context.set({})


setup_logging()
