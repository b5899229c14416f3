"""Structured logging configuration.

JSON lines when ENABLE_JSON_LOGS=1 (default), otherwise a short human
format. Request fields: request_id, path, method, status, duration_ms.
Document fields (set by the documents router): feature_count, crs_kind.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from time import perf_counter

_EXTRA_FIELDS = (
    "request_id",
    "path",
    "method",
    "status",
    "duration_ms",
    "feature_count",
    "crs_kind",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        for attr in _EXTRA_FIELDS:
            if hasattr(record, attr):
                base[attr] = getattr(record, attr)
        if record.exc_info and record.exc_info[0]:
            base["exc_type"] = record.exc_info[0].__name__
        return json.dumps(base, ensure_ascii=False)


class PlainFormatter(logging.Formatter):  # pragma: no cover - formatting
    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, datefmt="%H:%M:%S"),
            record.levelname[0],
            record.name + ":",
            record.getMessage(),
        ]
        for attr, short in (("request_id", "rid"), ("path", "path"), ("status", "status"), ("crs_kind", "crs")):
            if hasattr(record, attr):
                parts.append(f"{short}={getattr(record, attr)}")
        return " ".join(parts)


def configure_logging() -> None:
    if getattr(configure_logging, "_configured", False):  # idempotent
        return
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    json_enabled = os.getenv("ENABLE_JSON_LOGS", "1") == "1"
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):  # drop uvicorn's default handlers
        root.removeHandler(h)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_enabled else PlainFormatter())
    root.addHandler(handler)
    configure_logging._configured = True  # type: ignore[attr-defined]


async def logging_middleware(request, call_next):
    rid = uuid.uuid4().hex[:8]
    start = perf_counter()
    request.state.request_id = rid
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": rid, "path": request.url.path, "method": request.method})
    status = None
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        logger.info(
            "request.end",
            extra={
                "request_id": rid,
                "path": request.url.path,
                "method": request.method,
                "status": status,
                "duration_ms": round((perf_counter() - start) * 1000.0, 2),
            },
        )
