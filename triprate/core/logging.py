import json
import logging
import re
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
trip_id_ctx: ContextVar[Optional[str]] = ContextVar("trip_id", default=None)

REQUEST_ID_HEADER = "x-request-id"

# Extra record attributes copied into the JSON line when present
_EXTRA_FIELDS = ("method", "path", "status", "duration_ms")

_TRIP_PATH = re.compile(r"^/trips/([0-9a-fA-F-]{36})(?:/|$)")


class RequestContextFilter(logging.Filter):
    """Stamp every record with the current request and trip ids."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        record.trip_id = trip_id_ctx.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "request_id": getattr(record, "request_id", "-"),
            "trip_id": getattr(record, "trip_id", "-"),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                base[name] = getattr(record, name)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def init_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def trip_id_from_path(path: str) -> Optional[str]:
    match = _TRIP_PATH.match(path)
    return match.group(1).lower() if match else None


async def request_context_middleware(request, call_next):  # type: ignore
    """Bind request/trip ids for the duration of a request and log its outcome.

    An incoming ``x-request-id`` header is reused so ids can be correlated
    with the caller; it is echoed back on the response.
    """
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    rid_token = request_id_ctx.set(rid)
    trip_token = trip_id_ctx.set(trip_id_from_path(request.url.path))
    logger = logging.getLogger("triprate.request")
    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        logger.info(
            "request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
    finally:
        trip_id_ctx.reset(trip_token)
        request_id_ctx.reset(rid_token)
