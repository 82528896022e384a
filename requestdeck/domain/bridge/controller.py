#!/usr/bin/env python
"""
Transition controller for the rekordbox bridge.

Owns the single ``BridgeState``, applies track/playlist updates, demotes the
previous track into the recently played list and hands it to the matcher.

Flask serves requests and Socket.IO events on several threads, so every state
mutation and the broadcast that follows it run under one re-entrant lock. The
matching pass runs after the lock is released: two back-to-back track changes
may interleave their matching work, which is accepted.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from requestdeck.database.db_manager import SongRequest
from requestdeck.domain.requests.repository import SongRequestRepository
from requestdeck.models.track import Track

from .broadcast import BroadcastChannel
from .matching import RequestMatcher
from .state import BridgeState

logger = logging.getLogger(__name__)

TrackLike = Union[Track, dict]


def _coerce(track: TrackLike) -> Track:
    if isinstance(track, Track):
        return track
    return Track.model_validate(track)


class RekordboxBridge:
    def __init__(self, repository: SongRequestRepository, *, strict_matching: bool = False) -> None:
        self._repository = repository
        self._lock = threading.RLock()
        self._state = BridgeState()
        self.broadcaster = BroadcastChannel(self._state.snapshot, lock=self._lock)
        self.matcher = RequestMatcher(repository, self.confirm_played, strict=strict_matching)

    # --- reads -------------------------------------------------------------

    @property
    def current_track(self) -> Optional[Track]:
        with self._lock:
            return self._state.current_track

    @property
    def playlist(self) -> List[Track]:
        with self._lock:
            return list(self._state.playlist)

    @property
    def recently_played(self) -> List[Track]:
        with self._lock:
            return list(self._state.recently_played)

    def snapshot(self) -> dict:
        with self._lock:
            return self._state.snapshot()

    # --- transitions -------------------------------------------------------

    def set_current_track(self, track: TrackLike) -> List[int]:
        """Make ``track`` the playing track.

        A different previous track is demoted to ``played`` and matched
        against pending requests. Returns the ids of confirmed requests.
        """
        incoming = _coerce(track)
        demoted: Optional[Track] = None
        with self._lock:
            state = self._state
            previous = state.current_track
            if previous is not None and previous.id != incoming.id:
                demoted = previous.model_copy(
                    update={"status": "played", "played_at": datetime.now(timezone.utc)}
                )
                state.recently_played.appendleft(demoted)
                logger.info("Track finished: %r by %r", demoted.title, demoted.artist)

            state.current_track = incoming.model_copy(update={"status": "playing", "played_at": None})
            state.playlist = [t for t in state.playlist if t.id != incoming.id]
            self.broadcaster.broadcast()

        if demoted is None:
            return []
        return self.matcher.match_and_confirm(demoted)

    def set_playlist(self, tracks: Iterable[TrackLike]) -> List[Track]:
        """Replace the upcoming playlist; order of ``tracks`` is the play order."""
        queued = [
            _coerce(t).model_copy(update={"status": "queued", "position": index, "played_at": None})
            for index, t in enumerate(tracks)
        ]
        with self._lock:
            self._state.playlist = queued
            self.broadcaster.broadcast()
        logger.info("Playlist replaced with %d track(s)", len(queued))
        return list(queued)

    def confirm_played(self, request_id: int) -> Optional[SongRequest]:
        """Mark a song request played. Returns None when unknown or on failure."""
        try:
            updated = self._repository.set_request_status(request_id, "played")
        except Exception as e:
            logger.warning("Error marking song request %s as played: %s", request_id, e, exc_info=True)
            return None
        if updated is None:
            logger.info("Song request %s not found; nothing marked played", request_id)
            return None
        logger.info("Marked song request %s as played", request_id)
        return updated

    def shutdown(self) -> None:
        self.broadcaster.close_all()
        logger.info("Rekordbox bridge shut down")


__all__ = ["RekordboxBridge"]
