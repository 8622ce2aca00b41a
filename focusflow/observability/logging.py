"""
Structured JSON logging with request id and calling owner on every line.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from .context import bind_call, current_context

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.000Z",
        "level": "INFO",
        "logger": "focusflow.time_truth.block_manager",
        "message": "Created block block_1a2b3c4d5e6f ...",
        "request_id": "req-abc123",
        ...
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        ctx = current_context()
        if ctx is not None:
            log_obj["request_id"] = ctx.request_id
            if ctx.owner_id:
                log_obj["owner_id"] = ctx.owner_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Fields passed via extra={...}
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for local development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ctx = current_context()
        rid_str = ""
        if ctx is not None:
            owner = f" owner={ctx.owner_id}" if ctx.owner_id else ""
            rid_str = f"[{ctx.request_id[:12]}{owner}] "
        line = f"{timestamp} [{record.levelname}] {record.name}: {rid_str}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format. If None, auto-detect based on environment.
    """
    if json_format is None:
        # JSON in production (when not a TTY), human format in dev
        json_format = not sys.stderr.isatty()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    root_logger.addHandler(handler)


class CorrelationIdMiddleware:
    """
    ASGI middleware binding a CallContext to every request.

    Usage in api/server.py:
        app.add_middleware(CorrelationIdMiddleware)

    Reuses an incoming X-Request-ID header, generates one otherwise, and
    echoes it back on the response. The X-Owner-Id header, when present, is
    recorded as the calling owner so log lines can be traced to a caller.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {key.lower(): value for key, value in scope.get("headers", [])}

        def header(name: bytes) -> str | None:
            value = headers.get(name)
            return value.decode("latin-1").strip() if value else None

        with bind_call(header(b"x-request-id"), header(b"x-owner-id")) as ctx:
            request_id = ctx.request_id.encode("latin-1")

            async def send_with_id(message):
                if message["type"] == "http.response.start":
                    response_headers = list(message.get("headers", []))
                    response_headers.append((b"x-request-id", request_id))
                    message["headers"] = response_headers
                await send(message)

            await self.app(scope, receive, send_with_id)
