"""
Events service routes: create, read, update, delete events, and register attendees.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, jsonify, request, Response

from evntify.auth_service.utils import verify_token_from_request
from evntify.database.db_connection import get_store
from evntify.errors import ValidationError
from evntify.events_service import service

events_bp = Blueprint("events", __name__)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events, soonest first.

    Returns:
        200: List of event objects.
    """
    events = service.list_events(get_store())
    return jsonify([service.serialize_event(e) for e in events]), 200


@events_bp.route("/<int:event_id>", methods=["GET"])
def get_event(event_id: int) -> Tuple[Response, int]:
    """
    Get a single event by ID.

    Returns:
        200: Event object.
        404: Event not found.
    """
    event = service.get_event(get_store(), event_id)
    return jsonify(service.serialize_event(event)), 200


@events_bp.route("", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event owned by the caller.

    Required: title, description, date (ISO-8601), location, time,
    capacity (positive int), price (non-negative number).

    Returns:
        201: The created event.
        400: Validation error or invalid token.
        401: Missing token.
    """
    claims = verify_token_from_request()
    event = service.create_event(get_store(), claims, _json_body())
    return jsonify(service.serialize_event(event)), 201


@events_bp.route("/<int:event_id>", methods=["PUT"])
def update_event(event_id: int) -> Tuple[Response, int]:
    """
    Update an event.

    Permission:
    - The organizer of the event
    - OR an admin

    Returns:
        200: The updated event.
        400: Validation error.
        403: Forbidden.
        404: Event not found.
    """
    claims = verify_token_from_request()
    event = service.update_event(get_store(), claims, event_id, _json_body())
    return jsonify(service.serialize_event(event)), 200


@events_bp.route("/<int:event_id>", methods=["DELETE"])
def delete_event(event_id: int) -> Tuple[Response, int]:
    """
    Delete an event if the caller is its organizer or an admin.
    """
    claims = verify_token_from_request()
    service.delete_event(get_store(), claims, event_id)
    return jsonify({"message": "Event deleted successfully"}), 200


@events_bp.route("/<int:event_id>/register", methods=["POST"])
def register_for_event(event_id: int) -> Tuple[Response, int]:
    """
    Register the caller as an attendee.

    Returns:
        200: Registered.
        400: Already registered, or event at full capacity.
        404: Event not found.
    """
    claims = verify_token_from_request()
    service.register_for_event(get_store(), claims, event_id)
    return jsonify({"message": "Successfully registered for event"}), 200
