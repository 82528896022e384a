import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from flask_cors import CORS
from flask_socketio import SocketIO

# --- Import our configuration and the bridge services ---
from config import Config
from requestdeck.database.db_manager import initialize_database
from requestdeck.domain.bridge import RekordboxBridge
from requestdeck.domain.requests import DefaultSongRequestRepository
from requestdeck.interfaces.http.routes import (
    events_bp,
    song_requests_bp,
    rekordbox_bp,
    health_bp,
)
from requestdeck.interfaces.ws import init_rekordbox_socket
from requestdeck.observability import configure_structured_logging, metrics_blueprint, init_tracing


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask/Socket.IO loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"log-{timestamp}"
    log_path = os.path.join(log_dir, log_filename)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File: INFO and above
    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        # If console logging is enabled, keep it concise: warnings and above
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Quiet Flask/Werkzeug/Socket.IO own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app", "socketio", "engineio"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=True,
    )

    # Initialize database
    initialize_database(app)

    # Build services at the app boundary and expose them for routes
    repository = DefaultSongRequestRepository()
    bridge = RekordboxBridge(
        repository,
        strict_matching=app.config['REKORDBOX_STRICT_MATCHING'],
    )
    app.extensions['song_request_repository'] = repository
    app.extensions['rekordbox_bridge'] = bridge
    if bridge.matcher.strict:
        app.logger.info("Rekordbox bridge using strict request matching")

    # Flask-SocketIO registers itself as app.extensions['socketio']
    socketio = SocketIO(
        app,
        async_mode=app.config['SOCKETIO_ASYNC_MODE'],
        cors_allowed_origins=allowed_origins or None,
        logger=False,
        engineio_logger=False,
    )
    init_rekordbox_socket(socketio, bridge, app.config['REKORDBOX_NAMESPACE'])

    # --- Register Blueprints ---
    app.register_blueprint(events_bp)
    app.register_blueprint(song_requests_bp)
    app.register_blueprint(rekordbox_bp)
    app.register_blueprint(metrics_blueprint)
    app.register_blueprint(health_bp)

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'requestdeck', 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    # Create the app instance here
    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True

    socketio = app.extensions['socketio']
    logger.info("Starting Flask-SocketIO server on port %s...", Config.PORT)
    try:
        socketio.run(app, debug=Config.DEBUG, host='0.0.0.0', port=Config.PORT, allow_unsafe_werkzeug=True)
    finally:
        app.extensions['rekordbox_bridge'].shutdown()
