from .track import Track, TrackStatus
from .dto import EventCreate, SongRequestCreate, StatusUpdate, validation_details

__all__ = [
    "Track",
    "TrackStatus",
    "EventCreate",
    "SongRequestCreate",
    "StatusUpdate",
    "validation_details",
]
