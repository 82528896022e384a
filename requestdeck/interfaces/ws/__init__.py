"""Persistent viewer connections."""

from .rekordbox import RekordboxNamespace, SocketIOViewerChannel, init_rekordbox_socket

__all__ = ["RekordboxNamespace", "SocketIOViewerChannel", "init_rekordbox_socket"]
