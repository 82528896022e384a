#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-requestdeck'

    # Database
    # The app creates the SQLite file and tables at startup.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'requestdeck', 'database', 'instance', 'requestdeck.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Origins allowed to call /api/* with credentials (dashboard dev servers)
    CORS_ALLOWED_ORIGINS = _get_csv_list(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173',
    )

    # Song requests
    # Price in cents charged per request when the event does not set one (EUR 5.00)
    DEFAULT_REQUEST_PRICE_CENTS = max(0, _get_int('DEFAULT_REQUEST_PRICE_CENTS', 500))

    # Rekordbox bridge
    # Socket.IO namespace viewers connect to; kept apart from /api traffic
    REKORDBOX_NAMESPACE = os.getenv('REKORDBOX_NAMESPACE', '/ws/rekordbox')
    # Refuse matches on blank title/artist fields instead of the legacy substring rule
    REKORDBOX_STRICT_MATCHING = _get_bool('REKORDBOX_STRICT_MATCHING', False)
    # Duration (seconds) given to simulated tracks posted without one
    SIMULATED_TRACK_DURATION = max(1, _get_int('SIMULATED_TRACK_DURATION', 180))
    # threading keeps Socket.IO handlers and Flask requests on plain OS threads
    SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE', 'threading')

    # Observability (optional OTLP export)
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'requestdeck')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    PORT = _get_int('PORT', 5000)
