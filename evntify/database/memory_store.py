"""
In-process store.

Used for local development (no DATABASE_URL) and by the test suite.
All state lives on the instance; each event has its own lock so the
capacity check and the append in `add_attendee` are one atomic step.
"""

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from evntify.database.store import Record, Store, event_sort_key
from evntify.errors import AlreadyRegistered, CapacityExceeded, Conflict, NotFound, ValidationError


def _copy_event(event: Record) -> Record:
    copied = dict(event)
    copied["attendees"] = list(event["attendees"])
    return copied


class MemoryStore(Store):

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[int, Record] = {}
        self._user_ids_by_email: Dict[str, int] = {}
        self._events: Dict[int, Record] = {}
        self._event_locks: Dict[int, threading.Lock] = {}
        self._next_user_id = itertools.count(1)
        self._next_event_id = itertools.count(1)

    # --- USERS ---
    def create_user(self, name: str, email: str, password_hash: str, role: str = "user") -> Record:
        with self._lock:
            if email in self._user_ids_by_email:
                raise Conflict()
            user = {
                "id": next(self._next_user_id),
                "name": name,
                "email": email,
                "password_hash": password_hash,
                "role": role,
                "created_at": datetime.now(timezone.utc),
            }
            self._users[user["id"]] = user
            self._user_ids_by_email[email] = user["id"]
        logging.info(f"[MemoryStore] Created user {user['id']}")
        return dict(user)

    def get_user(self, user_id: int) -> Optional[Record]:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[Record]:
        with self._lock:
            user_id = self._user_ids_by_email.get(email)
            return dict(self._users[user_id]) if user_id is not None else None

    # --- EVENTS ---
    def create_event(self, fields: Record, organizer_id: int) -> Record:
        with self._lock:
            event = dict(fields)
            event.update({
                "id": next(self._next_event_id),
                "organizer": organizer_id,
                "attendees": [],
                "created_at": datetime.now(timezone.utc),
            })
            self._events[event["id"]] = event
            self._event_locks[event["id"]] = threading.Lock()
            return _copy_event(event)

    def list_events(self) -> List[Record]:
        with self._lock:
            events = [_copy_event(e) for e in self._events.values()]
        return sorted(events, key=event_sort_key)

    def get_event(self, event_id: int) -> Optional[Record]:
        with self._lock:
            event = self._events.get(event_id)
            return _copy_event(event) if event else None

    def _locked_event(self, event_id: int):
        """Return (event, lock), or (None, None) if the event does not exist."""
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                return None, None
            return event, self._event_locks[event_id]

    def update_event(self, event_id: int, changes: Record) -> Optional[Record]:
        event, lock = self._locked_event(event_id)
        if event is None:
            return None
        with lock:
            if event_id not in self._events:
                return None
            if "capacity" in changes and changes["capacity"] < len(event["attendees"]):
                raise ValidationError("capacity cannot be lower than the number of registered attendees")
            event.update(changes)
            return _copy_event(event)

    def delete_event(self, event_id: int) -> bool:
        event, lock = self._locked_event(event_id)
        if event is None:
            return False
        with lock:
            with self._lock:
                self._event_locks.pop(event_id, None)
                return self._events.pop(event_id, None) is not None

    def add_attendee(self, event_id: int, user_id: int) -> Record:
        event, lock = self._locked_event(event_id)
        if event is None:
            raise NotFound("Event not found")
        with lock:
            if event_id not in self._events:
                raise NotFound("Event not found")
            if user_id in event["attendees"]:
                raise AlreadyRegistered()
            if len(event["attendees"]) >= event["capacity"]:
                raise CapacityExceeded()
            event["attendees"].append(user_id)
            return _copy_event(event)
