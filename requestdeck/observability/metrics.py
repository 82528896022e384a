from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, Gauge, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

REKORDBOX_VIEWERS = Gauge(
    "requestdeck_rekordbox_viewers",
    "Viewer channels currently registered with the rekordbox bridge.",
)
REKORDBOX_STATE_UPDATES = Counter(
    "requestdeck_rekordbox_state_updates_total",
    "State snapshots delivered to individual viewers.",
)
REKORDBOX_DROPPED_MESSAGES = Counter(
    "requestdeck_rekordbox_dropped_messages_total",
    "Inbound rekordbox messages dropped as malformed.",
    ["reason"],
)
SONG_REQUESTS_AUTO_MATCHED = Counter(
    "requestdeck_song_requests_auto_matched_total",
    "Pending song requests confirmed as played by track matching.",
)
SONG_REQUESTS_CREATED = Counter(
    "requestdeck_song_requests_created_total",
    "Song requests submitted by attendees.",
)


def set_connected_viewers(count: int) -> None:
    REKORDBOX_VIEWERS.set(max(0, count))


def record_state_update_sent() -> None:
    REKORDBOX_STATE_UPDATES.inc()


def record_dropped_message(reason: str) -> None:
    REKORDBOX_DROPPED_MESSAGES.labels(reason=reason).inc()


def record_auto_match() -> None:
    SONG_REQUESTS_AUTO_MATCHED.inc()


def record_song_request_created() -> None:
    SONG_REQUESTS_CREATED.inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
