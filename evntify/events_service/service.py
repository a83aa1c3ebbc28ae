"""
Event operations: CRUD, ownership checks, and attendee registration.

`claims` is the dict returned by verify_token_from_request():
{"id", "email", "role"}.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from evntify.database.store import Store
from evntify.errors import AlreadyRegistered, CapacityExceeded, Forbidden, NotFound, ValidationError

EVENT_FIELDS = ("title", "description", "date", "location", "time", "capacity", "price")
TEXT_FIELDS = ("title", "description", "location", "time")
TITLE_MAX_LENGTH = 200

# Column limits in schema.sql
MAX_LENGTHS = {"title": TITLE_MAX_LENGTH, "location": 300, "time": 50}
CAPACITY_MAX = 2147483647
PRICE_MAX = 99999999.99


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime string to an aware datetime.

    Naive values are taken as UTC. Returns None if invalid.
    """
    if not isinstance(val, str) or not val:
        return None
    try:
        # Handles 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        parsed = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _clean_field(key: str, value: Any) -> Any:
    if key in TEXT_FIELDS:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{key} must be a non-empty string")
        limit = MAX_LENGTHS.get(key)
        if limit and len(value) > limit:
            raise ValidationError(f"{key.capitalize()} must be {limit} characters or less.")
        return value.strip()

    if key == "date":
        parsed = parse_dt(value)
        if not parsed:
            raise ValidationError("Invalid date format. Use ISO-8601.")
        return parsed

    if key == "capacity":
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError("capacity must be a positive integer")
        if value > CAPACITY_MAX:
            raise ValidationError(f"capacity must be at most {CAPACITY_MAX}")
        return value

    if key == "price":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValidationError("price must be a non-negative number")
        # NaN and Infinity slip through the JSON parser
        if not math.isfinite(value) or value > PRICE_MAX:
            raise ValidationError(f"price must be at most {PRICE_MAX}")
        return float(value)

    raise ValidationError(f"Unknown field '{key}'")


def validate_event_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Pick and validate the whitelisted event fields from `data`.

    With partial=False every field is required; with partial=True only the
    ones present are checked and at least one must be present. Keys outside
    EVENT_FIELDS are ignored.
    """
    if not partial:
        missing = [key for key in EVENT_FIELDS if data.get(key) is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    fields = {key: _clean_field(key, data[key]) for key in EVENT_FIELDS if key in data}

    if partial and not fields:
        raise ValidationError("No valid fields to update")

    return fields


def serialize_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-ready copy of an event record."""
    data = dict(event)
    data["date"] = event["date"].isoformat()
    data["created_at"] = event["created_at"].isoformat()
    data["attendees"] = list(event["attendees"])
    return data


def can_modify(claims: Dict[str, Any], event: Dict[str, Any]) -> bool:
    """Organizer of the event, or any admin."""
    return claims["id"] == event["organizer"] or claims["role"] == "admin"


def _require_event(store: Store, event_id: int) -> Dict[str, Any]:
    event = store.get_event(event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def _require_owner(claims: Dict[str, Any], event: Dict[str, Any], action: str) -> None:
    if not can_modify(claims, event):
        logging.warning(f"[Events] User {claims['id']} denied {action} on event {event['id']}")
        raise Forbidden(f"Not authorized to {action} this event")


def create_event(store: Store, claims: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    fields = validate_event_fields(data)
    event = store.create_event(fields, organizer_id=claims["id"])
    logging.info(f"[Events] User {claims['id']} created event {event['id']} '{event['title']}'")
    return event


def list_events(store: Store) -> List[Dict[str, Any]]:
    return store.list_events()


def get_event(store: Store, event_id: int) -> Dict[str, Any]:
    return _require_event(store, event_id)


def update_event(store: Store, claims: Dict[str, Any], event_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge whitelisted fields from `data` into the event.

    Permission: organizer or admin.
    """
    event = _require_event(store, event_id)
    _require_owner(claims, event, "update")

    changes = validate_event_fields(data, partial=True)
    updated = store.update_event(event_id, changes)
    if not updated:
        # Deleted between the lookup and the write
        raise NotFound("Event not found")

    logging.info(f"[Events] User {claims['id']} updated event {event_id}: {', '.join(changes)}")
    return updated


def delete_event(store: Store, claims: Dict[str, Any], event_id: int) -> None:
    event = _require_event(store, event_id)
    _require_owner(claims, event, "delete")

    if not store.delete_event(event_id):
        raise NotFound("Event not found")

    logging.info(f"[Events] User {claims['id']} deleted event {event_id}")


def register_for_event(store: Store, claims: Dict[str, Any], event_id: int) -> Dict[str, Any]:
    """
    Add the caller to the event's attendees.

    The duplicate and capacity checks run inside store.add_attendee() as one
    atomic step; see Store.add_attendee.
    """
    try:
        event = store.add_attendee(event_id, claims["id"])
    except (AlreadyRegistered, CapacityExceeded) as e:
        logging.warning(f"[Events] User {claims['id']} rejected for event {event_id}: {e.message}")
        raise
    logging.info(f"[Events] User {claims['id']} registered for event {event_id}")
    return event
