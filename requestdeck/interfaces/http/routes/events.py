"""Events and the song requests attendees submit to them."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from requestdeck.database.db_manager import REQUEST_STATUSES
from requestdeck.models.dto import EventCreate, SongRequestCreate, StatusUpdate, validation_details
from requestdeck.observability.metrics import record_song_request_created

logger = logging.getLogger(__name__)

events_bp = Blueprint('events_bp', __name__, url_prefix='/api/events')
song_requests_bp = Blueprint('song_requests_bp', __name__, url_prefix='/api/song-requests')


def _repository():
    return current_app.extensions['song_request_repository']


def _not_found(what: str):
    return jsonify({'error': 'not_found', 'message': f'{what} not found'}), 404


def _persistence_error(action: str, exc: Exception):
    logger.error("Failed to %s: %s", action, exc, exc_info=True)
    return jsonify({'error': 'persistence_error', 'message': f'Failed to {action}'}), 500


@events_bp.route('', methods=['GET'])
def list_events():
    try:
        events = _repository().list_events()
    except SQLAlchemyError as e:
        return _persistence_error('fetch events', e)
    return jsonify([event.to_dict() for event in events]), 200


@events_bp.route('', methods=['POST'])
def create_event():
    try:
        data = EventCreate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({'error': 'invalid_parameters', 'details': validation_details(e)}), 400

    price = data.request_price
    if price is None:
        price = current_app.config.get('DEFAULT_REQUEST_PRICE_CENTS', 500)
    try:
        event = _repository().create_event(
            name=data.name,
            venue=data.venue,
            start_time=data.start_time,
            end_time=data.end_time,
            dj_name=data.dj_name,
            entry_code=data.entry_code,
            request_price=price,
            image_url=data.image_url,
            is_active=data.is_active,
        )
    except SQLAlchemyError as e:
        return _persistence_error('create event', e)
    return jsonify(event.to_dict()), 201


@events_bp.route('/<int:event_id>', methods=['GET'])
def get_event(event_id: int):
    event = _repository().get_event(event_id)
    if event is None:
        return _not_found('Event')
    return jsonify(event.to_dict()), 200


@events_bp.route('/<int:event_id>/song-requests', methods=['GET'])
def list_song_requests(event_id: int):
    status = (request.args.get('status') or '').strip().lower() or None
    if status is not None and status not in REQUEST_STATUSES:
        return jsonify({'error': 'invalid_parameters', 'message': 'Invalid status'}), 400

    repository = _repository()
    if repository.get_event(event_id) is None:
        return _not_found('Event')
    try:
        rows = repository.list_requests_by_status(event_id, status)
    except SQLAlchemyError as e:
        return _persistence_error('fetch song requests', e)
    return jsonify([row.to_dict() for row in rows]), 200


@events_bp.route('/<int:event_id>/song-requests', methods=['POST'])
def create_song_request(event_id: int):
    repository = _repository()
    event = repository.get_event(event_id)
    if event is None:
        return _not_found('Event')

    try:
        data = SongRequestCreate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({'error': 'invalid_parameters', 'details': validation_details(e)}), 400

    try:
        row = repository.create_song_request(
            event.id,
            song_name=data.song_name,
            artist_name=data.artist_name,
            requester_name=data.requester_name,
            wishes=data.wishes,
            amount=event.request_price,
        )
    except SQLAlchemyError as e:
        return _persistence_error('create song request', e)

    record_song_request_created()
    logger.info("New request %s for event %s: %r by %r", row.id, event.id, row.song_name, row.artist_name)
    return jsonify(row.to_dict()), 201


@song_requests_bp.route('/<int:request_id>/status', methods=['PATCH'])
def update_song_request_status(request_id: int):
    try:
        data = StatusUpdate.model_validate(request.get_json(silent=True) or {})
    except ValidationError:
        return jsonify({'error': 'invalid_parameters', 'message': 'Invalid status'}), 400

    try:
        updated = _repository().set_request_status(request_id, data.status)
    except SQLAlchemyError as e:
        return _persistence_error('update song request status', e)
    if updated is None:
        return _not_found('Song request')
    return jsonify(updated.to_dict()), 200
