"""Structured JSON logging for the API process.

One JSON object per line on stdout. Every line carries the service name and
the current request id; the fields listed in `LOGGED_EXTRAS` are copied over
when a caller passes them through ``extra=``.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOGGED_EXTRAS = (
    "base_currency",
    "provider",
    "generation",
    "error_kind",
    "currencies",
    "method",
    "path",
    "status",
    "duration_ms",
)

# httpx logs each request URL at INFO, and rate provider URLs embed the API key
_QUIET_LOGGERS = ("httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    """Stamp each record with the request id and the service name."""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        record.service = self.service
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "service": getattr(record, "service", "-"),
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        line.update(
            (key, getattr(record, key)) for key in LOGGED_EXTRAS if hasattr(record, key)
        )
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def init_logging(debug: bool = False, service: str = "emicalc") -> None:
    """Route the root logger to stdout as JSON lines (replaces existing handlers)."""
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter(service))
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def request_context_middleware(request, call_next):  # type: ignore
    """Bind a request id for the duration of the request and log its outcome.

    The id comes from the ``x-request-id`` header when the client sends one and
    is echoed back on the response.
    """
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("emicalc.request")
    started = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers["x-request-id"] = rid
        return response
    finally:
        logger.info(
            "%s %s -> %s",
            request.method,
            request.url.path,
            status,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        request_id_ctx.reset(token)
