"""Structured Logging — JSON records carrying the request and store context of each event.

Invariants:
    - Every record has timestamp, level, logger name, and message
    - Records emitted while a request is in flight carry its method and path,
      stamped by RequestContextFilter from the RequestContextMiddleware context
    - Store and account fields (user_id, failure_kind, operation, error_code)
      appear only when the caller passed them as extras
    - JSON format in production, human-readable in development

Design Decisions:
    - setup_logging called once on startup via lifespan
    - Request context kept in a ContextVar so gateway and route logs need no
      Request object
"""

import logging
import json
from contextvars import ContextVar
from datetime import datetime, timezone

REQUEST_FIELDS = ("method", "path")
ACCOUNT_FIELDS = ("user_id", "error_code")
STORE_FIELDS = ("failure_kind", "operation")

_request_context: ContextVar[dict | None] = ContextVar(
    "account_service_request_context", default=None,
)


def current_request_context() -> dict:
    """Method and path of the request being served, empty outside one."""
    return _request_context.get() or {}


class RequestContextMiddleware:
    """ASGI middleware recording method and path for the duration of a request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        token = _request_context.set(
            {"method": scope["method"], "path": scope["path"]},
        )
        try:
            await self.app(scope, receive, send)
        finally:
            _request_context.reset(token)


class RequestContextFilter(logging.Filter):
    """Copy the in-flight request's method and path onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, val in current_request_context().items():
            if getattr(record, key, None) is None:
                setattr(record, key, val)
        return True


class JSONFormatter(logging.Formatter):
    """Format logs as JSON, grouping request, account and store context."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in REQUEST_FIELDS + ACCOUNT_FIELDS + STORE_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
