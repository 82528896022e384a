"""Song request persistence for events."""

from .repository import SongRequestRepository, DefaultSongRequestRepository

__all__ = ["SongRequestRepository", "DefaultSongRequestRepository"]
