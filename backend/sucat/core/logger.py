"""JSON logging with per-request correlation ids.

Token events are logged with a fixed set of structured extras
(``token_kind``, ``cause``, ``identity``) so that rejections can be grepped
without ever printing a token or a full email address.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Inbound headers honoured as the correlation id, first match wins
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

EXTRA_KEYS = ("endpoint", "elapsed_ms", "token_kind", "cause", "identity")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, structured extras included when set."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    The id is taken from the first inbound correlation header, else generated,
    and cached on ``g``. Outside a request a fresh uuid is returned.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return cached
    inbound = (request.headers.get(h) for h in INBOUND_ID_HEADERS)
    g.request_id = next((v for v in inbound if v), None) or str(uuid4())
    return g.request_id


def mask_identity(identity: str | None) -> str | None:
    """Hide all but the first character of the local part.

    ``"alice@example.com"`` -> ``"a***@example.com"``; values without ``@``
    keep their first character only.
    """
    if not identity:
        return identity
    local, at, domain = identity.partition("@")
    return f"{local[:1]}***{at}{domain}"


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        root.setLevel(numeric if isinstance(numeric, int) else level.upper())
    else:
        root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it back on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:  # pragma: no cover - integration glue
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):  # pragma: no cover - integration glue
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "init_app", "ensure_request_id", "mask_identity"]
