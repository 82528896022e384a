"""In-memory playback state mirrored from the DJ software."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from requestdeck.models.track import Track

RECENTLY_PLAYED_LIMIT = 50


@dataclass
class BridgeState:
    """Current track, upcoming playlist and recently played tracks.

    Lost on restart. Only the transition controller mutates it.
    """

    current_track: Optional[Track] = None
    playlist: List[Track] = field(default_factory=list)
    # Newest first; appendleft on a bounded deque evicts the oldest entry
    recently_played: Deque[Track] = field(
        default_factory=lambda: deque(maxlen=RECENTLY_PLAYED_LIMIT)
    )

    def snapshot(self) -> dict:
        return {
            "type": "state_update",
            "currentTrack": self.current_track.to_wire() if self.current_track else None,
            "playlist": [t.to_wire() for t in self.playlist],
            "recentlyPlayed": [t.to_wire() for t in self.recently_played],
        }


__all__ = ["BridgeState", "RECENTLY_PLAYED_LIMIT"]
