from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from requestdeck.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


def _viewer_count() -> int:
    bridge = current_app.extensions.get("rekordbox_bridge")
    if bridge is None:
        return 0
    return bridge.broadcaster.viewer_count


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:  # pragma: no cover - DB failure path
        status = 503
        checks["database"] = f"error: {exc}"

    checks["rekordbox_bridge"] = "ok" if current_app.extensions.get("rekordbox_bridge") else "unavailable"
    checks["rekordbox_viewers"] = _viewer_count()

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
