#!/usr/bin/env python
"""
Match tracks that just finished playing against pending song requests.

The rule is loose: a request matches when its song name and the
track title contain one another (either way, case-insensitive) and the same
holds for artist names. Blank fields therefore match everything; the strict
variant refuses those and is opt-in via ``REKORDBOX_STRICT_MATCHING``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, NamedTuple, Optional

from requestdeck.domain.requests.repository import SongRequestRepository
from requestdeck.models.track import Track
from requestdeck.observability.metrics import record_auto_match

logger = logging.getLogger(__name__)


def _contains_either_way(left: Optional[str], right: Optional[str]) -> bool:
    a = (left or "").casefold()
    b = (right or "").casefold()
    return a in b or b in a


def legacy_match(track: Track, request: Any) -> bool:
    # No artist-only matches: title gates the artist check
    if not _contains_either_way(request.song_name, track.title):
        return False
    return _contains_either_way(request.artist_name, track.artist)


def strict_match(track: Track, request: Any) -> bool:
    fields = (track.title, track.artist, request.song_name, request.artist_name)
    if any(not (value or "").strip() for value in fields):
        return False
    return legacy_match(track, request)


class _Candidate(NamedTuple):
    """Plain copy of a pending request; ORM rows expire on every commit."""

    id: int
    song_name: str
    artist_name: str


class RequestMatcher:
    """Scans every event's pending requests and confirms the ones a track satisfies."""

    def __init__(
        self,
        repository: SongRequestRepository,
        confirm: Callable[[int], Optional[Any]],
        *,
        strict: bool = False,
    ) -> None:
        self._repository = repository
        self._confirm = confirm
        self._matches = strict_match if strict else legacy_match

    @property
    def strict(self) -> bool:
        return self._matches is strict_match

    def match_and_confirm(self, track: Track) -> List[int]:
        """Confirm every matching pending request across all events.

        Returns the ids that were confirmed. Persistence failures abandon only
        the step that failed.
        """
        confirmed: List[int] = []
        try:
            event_ids = [event.id for event in self._repository.list_events()]
        except Exception as e:
            logger.warning("Matching %r skipped; could not list events: %s", track.title, e, exc_info=True)
            return confirmed

        for event_id in event_ids:
            try:
                pending = [
                    _Candidate(row.id, row.song_name, row.artist_name)
                    for row in self._repository.list_pending_requests(event_id)
                ]
            except Exception as e:
                logger.warning(
                    "Could not load pending requests for event %s: %s", event_id, e, exc_info=True
                )
                continue

            for request in pending:
                if not self._matches(track, request):
                    continue
                logger.info(
                    "Track %r by %r matches request %s (%r by %r) for event %s",
                    track.title,
                    track.artist,
                    request.id,
                    request.song_name,
                    request.artist_name,
                    event_id,
                )
                try:
                    updated = self._confirm(request.id)
                except Exception as e:
                    logger.warning(
                        "Could not confirm request %s as played: %s", request.id, e, exc_info=True
                    )
                    continue
                if updated is not None:
                    confirmed.append(request.id)
                    record_auto_match()
        return confirmed


__all__ = ["RequestMatcher", "legacy_match", "strict_match"]
