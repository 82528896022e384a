"""Route blueprints exposed via Flask."""

from .events import events_bp, song_requests_bp
from .rekordbox import rekordbox_bp
from .health import health_bp

__all__ = [
    "events_bp",
    "song_requests_bp",
    "rekordbox_bp",
    "health_bp",
]
