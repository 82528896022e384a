"""Rekordbox bridge: mirrored playback state, request matching and viewer fan-out."""

from .state import BridgeState, RECENTLY_PLAYED_LIMIT
from .broadcast import BroadcastChannel, ViewerChannel
from .matching import RequestMatcher, legacy_match, strict_match
from .controller import RekordboxBridge
from .protocol import ControlSurface, parse_message

__all__ = [
    "BridgeState",
    "RECENTLY_PLAYED_LIMIT",
    "BroadcastChannel",
    "ViewerChannel",
    "RequestMatcher",
    "legacy_match",
    "strict_match",
    "RekordboxBridge",
    "ControlSurface",
    "parse_message",
]
