"""Shared test doubles for bridge collaborators (viewer channels, repositories)."""

import json
from itertools import count
from types import SimpleNamespace

from requestdeck.domain.bridge import ViewerChannel
from requestdeck.domain.requests import SongRequestRepository


class RecordingChannel(ViewerChannel):
    """Viewer channel that keeps every message it was sent."""

    def __init__(self, name="viewer", *, open_=True, fail=False, log=None):
        self.name = name
        self.messages = []
        self.closed = False
        self._open = open_
        self._fail = fail
        self._log = log

    @property
    def is_open(self):
        return self._open and not self.closed

    def send(self, message):
        if self._fail:
            raise ConnectionError(f"{self.name} went away")
        self.messages.append(message)
        if self._log is not None:
            self._log.append(self.name)

    def close(self):
        self.closed = True

    @property
    def payloads(self):
        return [json.loads(m) for m in self.messages]

    @property
    def last(self):
        return self.payloads[-1]

    def __repr__(self):
        return f"<RecordingChannel {self.name}>"


class InMemorySongRequestRepository(SongRequestRepository):
    """Dict-backed repository; rows are SimpleNamespace objects."""

    def __init__(self):
        self.events = {}
        self.requests = {}
        self.status_calls = []
        self._ids = count(1)

    def add_event(self, name="Event"):
        event = SimpleNamespace(id=next(self._ids), name=name, request_price=500)
        self.events[event.id] = event
        return event

    def add_request(self, event, song_name, artist_name, status="pending"):
        row = SimpleNamespace(
            id=next(self._ids),
            event_id=event.id,
            song_name=song_name,
            artist_name=artist_name,
            status=status,
            played_time=None,
        )
        self.requests[row.id] = row
        return row

    def list_events(self):
        return list(self.events.values())

    def get_event(self, event_id):
        return self.events.get(event_id)

    def list_requests_by_status(self, event_id, status=None):
        return [
            r for r in self.requests.values()
            if r.event_id == event_id and (status is None or r.status == status)
        ]

    def get_request(self, request_id):
        return self.requests.get(request_id)

    def set_request_status(self, request_id, status):
        self.status_calls.append((request_id, status))
        row = self.requests.get(request_id)
        if row is None:
            return None
        row.status = status
        return row


class FlakyRepository(InMemorySongRequestRepository):
    """In-memory repository with switchable failures per operation."""

    def __init__(self):
        super().__init__()
        self.fail_list_events = False
        self.fail_pending_for = set()
        self.fail_status_for = set()

    def list_events(self):
        if self.fail_list_events:
            raise RuntimeError("database unavailable")
        return super().list_events()

    def list_requests_by_status(self, event_id, status=None):
        if event_id in self.fail_pending_for:
            raise RuntimeError(f"cannot read event {event_id}")
        return super().list_requests_by_status(event_id, status)

    def set_request_status(self, request_id, status):
        if request_id in self.fail_status_for:
            self.status_calls.append((request_id, status))
            raise RuntimeError(f"cannot update request {request_id}")
        return super().set_request_status(request_id, status)


__all__ = ["RecordingChannel", "InMemorySongRequestRepository", "FlakyRepository"]
