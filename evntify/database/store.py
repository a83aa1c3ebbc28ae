"""Store interface (repository pattern).

Every backend hands out plain dicts:

    user  = {"id", "name", "email", "password_hash", "role", "created_at"}
    event = {"id", "title", "description", "date", "location", "time",
             "capacity", "price", "organizer", "attendees", "created_at"}

`organizer` and `attendees` hold user ids, never user records.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]

USER_ROLES = ("user", "admin")


class Store(ABC):
    """Persistence collaborator for users and events."""

    # --- USERS ---
    @abstractmethod
    def create_user(self, name: str, email: str, password_hash: str, role: str = "user") -> Record:
        """Insert a user. Raises Conflict if the email is taken."""
        ...

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[Record]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[Record]:
        ...

    # --- EVENTS ---
    @abstractmethod
    def create_event(self, fields: Record, organizer_id: int) -> Record:
        """Insert an event owned by `organizer_id` with no attendees."""
        ...

    @abstractmethod
    def list_events(self) -> List[Record]:
        """Return all events ordered by date ascending, then id."""
        ...

    @abstractmethod
    def get_event(self, event_id: int) -> Optional[Record]:
        ...

    @abstractmethod
    def update_event(self, event_id: int, changes: Record) -> Optional[Record]:
        """
        Apply `changes` and return the updated event, or None if absent.

        Raises ValidationError if `capacity` would drop below the number
        of registered attendees.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: int) -> bool:
        """Return True if a row was removed."""
        ...

    @abstractmethod
    def add_attendee(self, event_id: int, user_id: int) -> Record:
        """
        Atomically check and append `user_id` to the event's attendees.

        Raises NotFound, AlreadyRegistered or CapacityExceeded. The checks
        and the write happen under one per-event lock/transaction so two
        concurrent calls can never overbook the event.
        """
        ...

    def close(self) -> None:
        """Release any held resources."""


def event_sort_key(event: Record):
    date: datetime = event["date"]
    return (date, event["id"])
