"""Live event song requests with a rekordbox playback bridge."""

__version__ = "0.1.0"
