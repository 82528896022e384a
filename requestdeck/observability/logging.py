import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from flask import g, has_app_context, has_request_context, request

# Extra record attributes rendered by JsonFormatter, in output order
CONTEXT_FIELDS = ("request_id", "path", "method", "remote_addr", "sid", "namespace")


class RequestContextFilter(logging.Filter):
    """Tag records with the HTTP request or Socket.IO event being handled."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            setattr(record, field, None)
        if has_app_context():
            record.request_id = getattr(g, "request_id", None)
        if not has_request_context():
            return True

        # Flask-SocketIO sets sid/namespace on the request while an event runs
        sid = getattr(request, "sid", None)
        if sid is not None:
            record.sid = sid
            record.namespace = getattr(request, "namespace", None)
        else:
            record.path = request.path
            record.method = request.method
        record.remote_addr = request.headers.get("X-Forwarded-For", request.remote_addr)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; context fields that are unset are left out."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_structured_logging(app) -> None:
    """Attach one JSON stdout handler to the root logger (idempotent across app instances)."""
    logging.getLogger("requestdeck").setLevel(logging.DEBUG if app.debug else logging.INFO)

    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and isinstance(handler.formatter, JsonFormatter):
            return

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(JsonFormatter())
    stream_handler.addFilter(RequestContextFilter())
    root.addHandler(stream_handler)
