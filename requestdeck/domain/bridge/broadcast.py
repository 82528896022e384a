#!/usr/bin/env python
"""
Viewer registry that pushes full state snapshots.

Delivery is fire-and-forget: a viewer whose transport is closed, or whose
send fails, simply misses that update. Closed viewers are not pruned here;
the transport unregisters them when it reports the disconnect.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Callable, Dict, Optional

from requestdeck.observability.metrics import record_state_update_sent, set_connected_viewers

logger = logging.getLogger(__name__)


class ViewerChannel:
    """One connected viewer. Transports implement this."""

    @property
    def is_open(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    def send(self, message: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class BroadcastChannel:
    def __init__(self, snapshot: Callable[[], dict], lock: Optional[threading.RLock] = None) -> None:
        self._snapshot = snapshot
        self._lock = lock or threading.RLock()
        # dicts keep insertion order, so fan-out follows registration order
        self._viewers: Dict[ViewerChannel, None] = {}

    @property
    def viewer_count(self) -> int:
        with self._lock:
            return len(self._viewers)

    def register(self, channel: ViewerChannel) -> None:
        """Add a viewer and send it the current state straight away."""
        with self._lock:
            self._viewers[channel] = None
            set_connected_viewers(len(self._viewers))
            self.send_state(channel)

    def unregister(self, channel: ViewerChannel) -> None:
        with self._lock:
            self._viewers.pop(channel, None)
            set_connected_viewers(len(self._viewers))

    def send_state(self, channel: ViewerChannel) -> None:
        """Unicast the current snapshot (answer to ``get_state``)."""
        with self._lock:
            payload = json.dumps(self._snapshot(), ensure_ascii=False)
            self._deliver(channel, payload)

    def broadcast(self) -> int:
        """Send one snapshot to every open viewer; returns how many got it."""
        with self._lock:
            payload = json.dumps(self._snapshot(), ensure_ascii=False)
            delivered = 0
            for channel in list(self._viewers):
                if not channel.is_open:
                    continue
                if self._deliver(channel, payload):
                    delivered += 1
            return delivered

    def close_all(self) -> None:
        with self._lock:
            viewers = list(self._viewers)
            self._viewers.clear()
            set_connected_viewers(0)
        for channel in viewers:
            try:
                channel.close()
            except Exception as e:
                logger.warning("Failed to close viewer channel %r: %s", channel, e)

    def _deliver(self, channel: ViewerChannel, payload: str) -> bool:
        try:
            channel.send(payload)
        except Exception as e:
            logger.warning("Dropped state update for viewer %r: %s", channel, e)
            return False
        record_state_update_sent()
        return True


__all__ = ["ViewerChannel", "BroadcastChannel"]
