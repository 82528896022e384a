"""Dashboard controls for the rekordbox bridge (simulated DJ software + manual confirm)."""

from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from flask import Blueprint, current_app, jsonify, request
from pydantic import TypeAdapter, ValidationError

from requestdeck.models.dto import validation_details
from requestdeck.models.track import Track

logger = logging.getLogger(__name__)

rekordbox_bp = Blueprint('rekordbox_bp', __name__, url_prefix='/api/rekordbox')

_track_list_adapter = TypeAdapter(List[Track])


def _get_bridge():
    return current_app.extensions.get('rekordbox_bridge')


def _bridge_unavailable():
    return jsonify({'error': 'bridge_unavailable', 'message': 'Rekordbox bridge is not running'}), 503


@rekordbox_bp.route('/state', methods=['GET'])
def get_state():
    bridge = _get_bridge()
    if bridge is None:
        return _bridge_unavailable()
    return jsonify(bridge.snapshot()), 200


@rekordbox_bp.route('/simulate/playing', methods=['POST'])
def simulate_playing():
    """Pretend the DJ software started a track; the previous one counts as played."""
    bridge = _get_bridge()
    if bridge is None:
        return _bridge_unavailable()

    payload = request.get_json(silent=True) or {}
    track_payload = {
        'id': payload.get('id') or f"sim-{uuid4().hex[:12]}",
        'title': payload.get('title') or 'Unknown Title',
        'artist': payload.get('artist') or 'Unknown Artist',
        'album': payload.get('album'),
        'duration': payload.get('duration') or current_app.config.get('SIMULATED_TRACK_DURATION', 180),
        'position': payload.get('position') or 0,
    }
    try:
        track = Track.model_validate(track_payload)
    except ValidationError as e:
        return jsonify({'error': 'invalid_track', 'details': validation_details(e)}), 400

    matched = bridge.set_current_track(track)
    return jsonify({'ok': True, 'state': bridge.snapshot(), 'matchedRequestIds': matched}), 200


@rekordbox_bp.route('/simulate/playlist', methods=['POST'])
def simulate_playlist():
    bridge = _get_bridge()
    if bridge is None:
        return _bridge_unavailable()

    payload = request.get_json(silent=True) or {}
    tracks = payload.get('tracks')
    if not isinstance(tracks, list):
        return jsonify({'error': 'invalid_parameters', 'message': 'tracks must be a list'}), 400
    try:
        parsed = _track_list_adapter.validate_python(tracks)
    except ValidationError as e:
        return jsonify({'error': 'invalid_track', 'details': validation_details(e)}), 400

    playlist = bridge.set_playlist(parsed)
    return jsonify({'ok': True, 'playlist': [t.to_wire() for t in playlist]}), 200


@rekordbox_bp.route('/mark-played/<int:request_id>', methods=['POST'])
def mark_played(request_id: int):
    bridge = _get_bridge()
    if bridge is None:
        return _bridge_unavailable()

    updated = bridge.confirm_played(request_id)
    if updated is None:
        return jsonify({'error': 'not_found', 'message': 'Song request not found'}), 404
    return jsonify(updated.to_dict()), 200
