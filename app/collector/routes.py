"""
Collector Routes

Flask routes for the collection endpoint and per-session read views.
"""

import json
from flask import Blueprint, request, jsonify

from .services import CollectorService


def create_collector_blueprint(collector_service: CollectorService) -> Blueprint:
    """Create a Flask blueprint for the collection endpoint.

    Args:
        collector_service: The collector service instance

    Returns:
        Flask blueprint with collector routes
    """
    bp = Blueprint('collector', __name__)

    @bp.route("/api/analytics", methods=["POST"])
    def ingest_event():
        """Ingest one event posted by a pipeline sink."""
        payload = request.get_json(silent=True)
        if payload is None:
            raw = request.get_data(as_text=True) or ""
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                return jsonify({"error": "invalid-json"}), 400

        if not isinstance(payload, dict):
            return jsonify({"error": "invalid-event"}), 400

        event = collector_service.ingest(payload)
        if event is None:
            return jsonify({"error": "invalid-event"}), 400

        return jsonify({"status": "ok"})

    @bp.route("/api/analytics/sessions", methods=["GET"])
    def list_sessions():
        """List sessions with stored events."""
        return jsonify({
            "status": "ok",
            "sessions": collector_service.list_sessions()
        })

    @bp.route("/api/analytics/sessions/<session_id>/events", methods=["GET"])
    def get_events(session_id):
        """Get stored events for a session."""
        if not collector_service.is_valid_session_id(session_id):
            return jsonify({"error": "invalid-session"}), 400

        limit = request.args.get("limit", type=int)
        events = collector_service.get_session_events(session_id, limit=limit)
        return jsonify({
            "status": "ok",
            "events": [event.to_dict() for event in events]
        })

    @bp.route("/api/analytics/sessions/<session_id>/stats", methods=["GET"])
    def get_event_stats(session_id):
        """Get event counts per name for a session."""
        if not collector_service.is_valid_session_id(session_id):
            return jsonify({"error": "invalid-session"}), 400

        return jsonify({
            "status": "ok",
            "stats": collector_service.get_event_stats(session_id)
        })

    @bp.route("/api/analytics/sessions/<session_id>/dashboard", methods=["GET"])
    def get_dashboard(session_id):
        """Get dashboard summaries for a session."""
        if not collector_service.is_valid_session_id(session_id):
            return jsonify({"error": "invalid-session"}), 400

        return jsonify({
            "status": "ok",
            "dashboard": collector_service.get_dashboard(session_id)
        })

    return bp
