"""Socket.IO namespace carrying the rekordbox bridge protocol."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from flask import request
from flask_socketio import Namespace, SocketIO

from requestdeck.domain.bridge import ControlSurface, RekordboxBridge, ViewerChannel

logger = logging.getLogger(__name__)

OUTBOUND_EVENT = 'message'


class SocketIOViewerChannel(ViewerChannel):
    """A connected Socket.IO client; snapshots go out as ``message`` events of JSON text."""

    def __init__(self, socketio: SocketIO, sid: str, namespace: str) -> None:
        self._socketio = socketio
        self.sid = sid
        self.namespace = namespace
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def mark_closed(self) -> None:
        self._open = False

    def send(self, message: str) -> None:
        self._socketio.emit(OUTBOUND_EVENT, message, to=self.sid, namespace=self.namespace)

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._socketio.server.disconnect(self.sid, namespace=self.namespace)

    def __repr__(self) -> str:
        return f'<SocketIOViewerChannel {self.namespace} sid={self.sid}>'


class RekordboxNamespace(Namespace):
    def __init__(self, namespace: str, bridge: RekordboxBridge) -> None:
        super().__init__(namespace)
        self._bridge = bridge
        self._control = ControlSurface(bridge)
        self._channels: Dict[str, SocketIOViewerChannel] = {}

    def channel_for(self, sid: str) -> Optional[SocketIOViewerChannel]:
        return self._channels.get(sid)

    def on_connect(self, auth=None):
        channel = SocketIOViewerChannel(self.socketio, request.sid, self.namespace)
        self._channels[request.sid] = channel
        logger.info('New rekordbox viewer connected: %s', request.sid)
        self._bridge.broadcaster.register(channel)

    def on_disconnect(self, reason=None):
        channel = self._channels.pop(request.sid, None)
        if channel is None:
            return
        channel.mark_closed()
        self._bridge.broadcaster.unregister(channel)
        logger.info('Rekordbox viewer disconnected: %s', request.sid)

    def on_message(self, data):
        # Plain send() of JSON text
        self._control.handle(data, self.channel_for(request.sid))

    def on_json(self, data):
        # send(..., json=True) from Socket.IO clients
        self._control.handle(data, self.channel_for(request.sid))


def init_rekordbox_socket(socketio: SocketIO, bridge: RekordboxBridge, namespace: str) -> RekordboxNamespace:
    handler = RekordboxNamespace(namespace, bridge)
    socketio.on_namespace(handler)
    logger.info('Rekordbox Socket.IO namespace initialized at %s', namespace)
    return handler


__all__ = ['SocketIOViewerChannel', 'RekordboxNamespace', 'init_rekordbox_socket']
