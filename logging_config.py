"""
Structured logging configuration.

- JSON format for production, readable text for development
- Every record carries the request id and the calling user id
- Access log per API request, levelled by response status
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from flask import Flask, g, has_request_context, request

ACCESS_LOGGER = "govlead.access"

# Polled by load balancers; left out of the access log
QUIET_PATHS = ("/api/health",)


class RequestContextFilter(logging.Filter):
    """Stamp request_id and caller_id onto records emitted during a request."""

    def __init__(self, identity_header: str = "X-User-Id"):
        super().__init__()
        self.identity_header = identity_header

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", "-")
            record.caller_id = request.headers.get(self.identity_header) or "-"
        else:
            record.request_id = "-"
            record.caller_id = "-"
        return True


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "caller_id": getattr(record, "caller_id", "-"),
        }
        for key in ("method", "path", "status", "duration_ms"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _access_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def init_logging(app: Flask) -> None:
    """Configure root logging and per-request access logs from app config."""
    log_level = app.config.get("LOG_LEVEL", "INFO")
    identity_header = app.config.get("IDENTITY_HEADER", "X-User-Id")

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    if app.config.get("LOG_FORMAT", "text") == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s req=%(request_id)s user=%(caller_id)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    handler.addFilter(RequestContextFilter(identity_header))
    root.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    access_log = logging.getLogger(ACCESS_LOGGER)

    @app.before_request
    def _attach_request_id():
        g.request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def _log_request(response):
        response.headers["X-Request-Id"] = getattr(g, "request_id", "-")
        if request.path in QUIET_PATHS:
            return response
        duration_ms = (time.time() - getattr(g, "request_start", time.time())) * 1000
        access_log.log(
            _access_level(response.status_code),
            "%s %s %s %.0fms",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms),
            },
        )
        return response
