#!/usr/bin/env python
"""
Inbound control messages for the rekordbox bridge.

Viewers send JSON objects tagged by ``type``. The protocol is fire-and-forget:
anything that fails to parse or validate is logged and dropped, and nothing is
sent back to the sender.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from requestdeck.models.track import Track
from requestdeck.observability.metrics import record_dropped_message

from .broadcast import ViewerChannel
from .controller import RekordboxBridge

logger = logging.getLogger(__name__)


class _Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GetState(_Message):
    type: Literal["get_state"]


class UpdateTrack(_Message):
    type: Literal["update_track"]
    track: Track


class UpdatePlaylist(_Message):
    type: Literal["update_playlist"]
    tracks: List[Track]


class MarkAsPlayed(_Message):
    type: Literal["mark_as_played"]
    song_request_id: int = Field(alias="songRequestId")


ControlMessage = Annotated[
    Union[GetState, UpdateTrack, UpdatePlaylist, MarkAsPlayed],
    Field(discriminator="type"),
]

_control_message_adapter = TypeAdapter(ControlMessage)


def parse_message(raw: Any) -> Optional[BaseModel]:
    """Decode JSON text or an already decoded object; None when malformed."""
    data = raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Dropped non-JSON rekordbox message: %s", e)
            record_dropped_message("invalid_json")
            return None
    try:
        return _control_message_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(
            "Dropped malformed rekordbox message (%d error(s)): %s",
            e.error_count(),
            e.errors(include_url=False, include_input=False),
        )
        record_dropped_message("invalid_payload")
        return None


class ControlSurface:
    """Dispatches inbound viewer messages to the bridge."""

    def __init__(self, bridge: RekordboxBridge) -> None:
        self._bridge = bridge

    def handle(self, raw: Any, channel: Optional[ViewerChannel] = None) -> None:
        message = parse_message(raw)
        if message is None:
            return
        try:
            self.dispatch(message, channel)
        except Exception as e:
            # Never let one bad update take the connection down
            logger.error("Error handling rekordbox %s message: %s", message.type, e, exc_info=True)

    def dispatch(self, message: BaseModel, channel: Optional[ViewerChannel] = None) -> None:
        if isinstance(message, GetState):
            if channel is not None:
                self._bridge.broadcaster.send_state(channel)
        elif isinstance(message, UpdateTrack):
            self._bridge.set_current_track(message.track)
        elif isinstance(message, UpdatePlaylist):
            self._bridge.set_playlist(message.tracks)
        elif isinstance(message, MarkAsPlayed):
            self._bridge.confirm_played(message.song_request_id)


__all__ = [
    "ControlSurface",
    "ControlMessage",
    "GetState",
    "UpdateTrack",
    "UpdatePlaylist",
    "MarkAsPlayed",
    "parse_message",
]
