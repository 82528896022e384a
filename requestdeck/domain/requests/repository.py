from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from requestdeck.database.db_manager import db, Event, SongRequest, REQUEST_STATUSES, utcnow


logger = logging.getLogger(__name__)


class SongRequestRepository:
    """Interface the bridge and routes use to read events and move requests between statuses."""

    def list_events(self) -> List[Event]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_event(self, event_id: int) -> Optional[Event]:  # pragma: no cover - interface
        raise NotImplementedError

    def list_requests_by_status(self, event_id: int, status: Optional[str] = None) -> List[SongRequest]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[SongRequest]:  # pragma: no cover - interface
        raise NotImplementedError

    def set_request_status(self, request_id: int, status: str) -> Optional[SongRequest]:  # pragma: no cover - interface
        raise NotImplementedError

    def list_pending_requests(self, event_id: int) -> List[SongRequest]:
        return self.list_requests_by_status(event_id, 'pending')


class DefaultSongRequestRepository(SongRequestRepository):
    def list_events(self) -> List[Event]:
        try:
            return Event.query.order_by(Event.id).all()
        except Exception:
            db.session.rollback()
            raise

    def get_event(self, event_id: int) -> Optional[Event]:
        return db.session.get(Event, event_id)

    def list_requests_by_status(self, event_id: int, status: Optional[str] = None) -> List[SongRequest]:
        query = SongRequest.query.filter_by(event_id=event_id)
        if status:
            query = query.filter(SongRequest.status == status)
        try:
            return query.order_by(SongRequest.id).all()
        except Exception:
            # Leave the session usable for the next read
            db.session.rollback()
            raise

    def get_request(self, request_id: int) -> Optional[SongRequest]:
        return db.session.get(SongRequest, request_id)

    def set_request_status(self, request_id: int, status: str) -> Optional[SongRequest]:
        """Move a request to ``status``; returns None when the id is unknown.

        Writing ``played`` again on an already played request is accepted and
        refreshes ``played_time``.
        """
        if status not in REQUEST_STATUSES:
            raise ValueError(f"Invalid song request status: {status!r}")
        try:
            row = db.session.get(SongRequest, request_id)
            if row is None:
                return None
            row.status = status
            if status == 'played':
                row.played_time = utcnow()
            db.session.commit()
            return row
        except Exception:
            db.session.rollback()
            raise

    def create_event(
        self,
        *,
        name: str,
        venue: str,
        start_time: datetime,
        end_time: datetime,
        dj_name: str = '',
        entry_code: str = '',
        request_price: int = 500,
        image_url: Optional[str] = None,
        is_active: bool = True,
    ) -> Event:
        event = Event(
            name=name,
            venue=venue,
            start_time=start_time,
            end_time=end_time,
            dj_name=dj_name,
            entry_code=entry_code,
            request_price=request_price,
            image_url=image_url,
            is_active=is_active,
        )
        try:
            db.session.add(event)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Created event %s (%s)", event.id, event.name)
        return event

    def create_song_request(
        self,
        event_id: int,
        *,
        song_name: str,
        artist_name: str,
        requester_name: str,
        amount: int,
        wishes: str = '',
    ) -> SongRequest:
        row = SongRequest(
            event_id=event_id,
            song_name=song_name,
            artist_name=artist_name,
            requester_name=requester_name,
            wishes=wishes,
            amount=amount,
            status='pending',
        )
        try:
            db.session.add(row)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return row


__all__ = ["SongRequestRepository", "DefaultSongRequestRepository"]
