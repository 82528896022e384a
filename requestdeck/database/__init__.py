"""SQLAlchemy models and database bootstrap."""

from .db_manager import db, Event, SongRequest, REQUEST_STATUSES, initialize_database

__all__ = ["db", "Event", "SongRequest", "REQUEST_STATUSES", "initialize_database"]
