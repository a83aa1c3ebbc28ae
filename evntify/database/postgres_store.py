"""
PostgreSQL store backed by a psycopg2 connection pool.

Each public method runs in its own transaction: a connection is borrowed
from the pool, committed (or rolled back on error), and returned.
Registration and capacity changes lock the event row with
SELECT ... FOR UPDATE so concurrent requests on the same event serialize.

ThreadedConnectionPool raises PoolError instead of waiting once every
connection is out, so callers queue on a semaphore sized to the pool.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg2.errors

from evntify.database.store import Record, Store
from evntify.errors import AlreadyRegistered, CapacityExceeded, Conflict, NotFound, ValidationError

# API field -> column. Also the whitelist for dynamic UPDATE clauses.
EVENT_COLUMNS = {
    "title": "title",
    "description": "description",
    "date": "event_date",
    "location": "location",
    "time": "event_time",
    "capacity": "capacity",
    "price": "price",
}

USER_SELECT = "SELECT user_id, name, email, password_hash, role, created_at FROM users"

EVENT_SELECT = """
    SELECT
        e.event_id, e.title, e.description, e.event_date, e.location,
        e.event_time, e.capacity, e.price, e.organizer_id, e.created_at,
        COALESCE(
            ARRAY_AGG(a.user_id ORDER BY a.registered_at) FILTER (WHERE a.user_id IS NOT NULL),
            '{}'
        ) AS attendees
    FROM events e
    LEFT JOIN event_attendees a ON a.event_id = e.event_id
"""


def user_from_row(row: Dict[str, Any]) -> Record:
    return {
        "id": row["user_id"],
        "name": row["name"],
        "email": row["email"],
        "password_hash": row["password_hash"],
        "role": row["role"],
        "created_at": row["created_at"],
    }


def event_from_row(row: Dict[str, Any]) -> Record:
    return {
        "id": row["event_id"],
        "title": row["title"],
        "description": row["description"],
        "date": row["event_date"],
        "location": row["location"],
        "time": row["event_time"],
        "capacity": row["capacity"],
        # NUMERIC comes back as Decimal
        "price": float(row["price"]),
        "organizer": row["organizer_id"],
        "attendees": list(row["attendees"] or []),
        "created_at": row["created_at"],
    }


class PostgresStore(Store):

    def __init__(self, pool, max_connections: int = 10) -> None:
        self._pool = pool
        self._slots = threading.BoundedSemaphore(max_connections)

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        """Yield a cursor inside a transaction on a pooled connection."""
        with self._slots:
            conn = self._pool.getconn()
            try:
                # `with conn` commits on success and rolls back on exception
                with conn:
                    with conn.cursor() as cur:
                        yield cur
            finally:
                self._pool.putconn(conn)

    def close(self) -> None:
        self._pool.closeall()

    # --- USERS ---
    def create_user(self, name: str, email: str, password_hash: str, role: str = "user") -> Record:
        sql = """
            INSERT INTO users (name, email, password_hash, role)
            VALUES (%s, %s, %s, %s)
            RETURNING user_id, name, email, password_hash, role, created_at;
        """
        try:
            with self._cursor() as cur:
                cur.execute(sql, (name, email, password_hash, role))
                row = cur.fetchone()
        except psycopg2.errors.UniqueViolation:
            raise Conflict()
        return user_from_row(row)

    def get_user(self, user_id: int) -> Optional[Record]:
        with self._cursor() as cur:
            cur.execute(f"{USER_SELECT} WHERE user_id = %s;", (user_id,))
            row = cur.fetchone()
        return user_from_row(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Record]:
        with self._cursor() as cur:
            cur.execute(f"{USER_SELECT} WHERE email = %s;", (email,))
            row = cur.fetchone()
        return user_from_row(row) if row else None

    # --- EVENTS ---
    def _fetch_event(self, cur, event_id: int) -> Optional[Record]:
        cur.execute(f"{EVENT_SELECT} WHERE e.event_id = %s GROUP BY e.event_id;", (event_id,))
        row = cur.fetchone()
        return event_from_row(row) if row else None

    def create_event(self, fields: Record, organizer_id: int) -> Record:
        sql = """
            INSERT INTO events (
                title, description, event_date, location,
                event_time, capacity, price, organizer_id
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING event_id;
        """
        with self._cursor() as cur:
            cur.execute(sql, (
                fields["title"], fields["description"], fields["date"], fields["location"],
                fields["time"], fields["capacity"], fields["price"], organizer_id,
            ))
            event_id = cur.fetchone()["event_id"]
            return self._fetch_event(cur, event_id)

    def list_events(self) -> List[Record]:
        with self._cursor() as cur:
            cur.execute(f"{EVENT_SELECT} GROUP BY e.event_id ORDER BY e.event_date, e.event_id;")
            rows = cur.fetchall()
        return [event_from_row(r) for r in rows]

    def get_event(self, event_id: int) -> Optional[Record]:
        with self._cursor() as cur:
            return self._fetch_event(cur, event_id)

    def update_event(self, event_id: int, changes: Record) -> Optional[Record]:
        with self._cursor() as cur:
            cur.execute("SELECT event_id FROM events WHERE event_id = %s FOR UPDATE;", (event_id,))
            if not cur.fetchone():
                return None

            if "capacity" in changes:
                cur.execute(
                    "SELECT COUNT(*) AS attendee_count FROM event_attendees WHERE event_id = %s;",
                    (event_id,),
                )
                if cur.fetchone()["attendee_count"] > changes["capacity"]:
                    raise ValidationError("capacity cannot be lower than the number of registered attendees")

            fields = [f"{EVENT_COLUMNS[key]} = %s" for key in changes]
            values = list(changes.values()) + [event_id]
            cur.execute(f"UPDATE events SET {', '.join(fields)} WHERE event_id = %s;", values)
            return self._fetch_event(cur, event_id)

    def delete_event(self, event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM events WHERE event_id = %s;", (event_id,))
            return cur.rowcount > 0

    def add_attendee(self, event_id: int, user_id: int) -> Record:
        with self._cursor() as cur:
            cur.execute("SELECT capacity FROM events WHERE event_id = %s FOR UPDATE;", (event_id,))
            event = cur.fetchone()
            if not event:
                raise NotFound("Event not found")

            cur.execute(
                """
                SELECT COUNT(*) AS attendee_count, BOOL_OR(user_id = %s) AS registered
                FROM event_attendees
                WHERE event_id = %s;
                """,
                (user_id, event_id),
            )
            stats = cur.fetchone()
            if stats["registered"]:
                raise AlreadyRegistered()
            if stats["attendee_count"] >= event["capacity"]:
                raise CapacityExceeded()

            cur.execute(
                "INSERT INTO event_attendees (event_id, user_id) VALUES (%s, %s);",
                (event_id, user_id),
            )
            return self._fetch_event(cur, event_id)
