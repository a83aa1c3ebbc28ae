"""
Attendee registration and capacity enforcement.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from evntify.database.memory_store import MemoryStore
from evntify.errors import AlreadyRegistered, CapacityExceeded, NotFound
from evntify.events_service import service


def test_register_then_duplicate_then_full(client, signup, create_event, bearer):
    a_token, a_user = signup(name="A", email="a@x.com")
    b_token, _ = signup(name="B", email="b@x.com")
    event = create_event(a_token, capacity=1)
    url = f"/api/events/{event['id']}/register"

    first = client.post(url, headers=bearer(a_token))
    assert first.status_code == 200
    assert first.get_json()["message"] == "Successfully registered for event"

    again = client.post(url, headers=bearer(a_token))
    assert again.status_code == 400
    assert again.get_json()["message"] == "You are already registered for this event"

    other = client.post(url, headers=bearer(b_token))
    assert other.status_code == 400
    assert other.get_json()["message"] == "Event is at full capacity"

    assert client.get(f"/api/events/{event['id']}").get_json()["attendees"] == [a_user["id"]]


def test_register_for_missing_event(client, signup, bearer):
    token, _ = signup()
    response = client.post("/api/events/42/register", headers=bearer(token))
    assert response.status_code == 404


def test_register_requires_token(client, signup, create_event):
    token, _ = signup()
    event = create_event(token)

    response = client.post(f"/api/events/{event['id']}/register")
    assert response.status_code == 401


def _make_event(store, capacity):
    organizer = store.create_user("Org", "org@x.com", "hash")
    fields = service.validate_event_fields({
        "title": "Concert",
        "description": "Live",
        "date": "2025-07-01",
        "location": "Hall",
        "time": "20:00",
        "capacity": capacity,
        "price": 25.5,
    })
    return store.create_event(fields, organizer_id=organizer["id"])


def test_service_capacity_n():
    store = MemoryStore()
    event = _make_event(store, capacity=3)

    for user_id in (10, 11, 12):
        service.register_for_event(store, {"id": user_id, "email": "u@x.com", "role": "user"}, event["id"])

    with pytest.raises(CapacityExceeded):
        service.register_for_event(store, {"id": 13, "email": "u@x.com", "role": "user"}, event["id"])

    assert store.get_event(event["id"])["attendees"] == [10, 11, 12]


def test_service_already_registered_checked_before_capacity():
    store = MemoryStore()
    event = _make_event(store, capacity=1)
    claims = {"id": 10, "email": "u@x.com", "role": "user"}

    service.register_for_event(store, claims, event["id"])

    with pytest.raises(AlreadyRegistered):
        service.register_for_event(store, claims, event["id"])


def test_service_register_missing_event():
    with pytest.raises(NotFound):
        service.register_for_event(MemoryStore(), {"id": 1, "email": "u@x.com", "role": "user"}, 7)


def test_concurrent_registrations_never_overbook():
    store = MemoryStore()
    capacity = 5
    event = _make_event(store, capacity=capacity)

    def attempt(user_id):
        try:
            service.register_for_event(store, {"id": user_id, "email": "u@x.com", "role": "user"}, event["id"])
            return "ok"
        except CapacityExceeded:
            return "full"

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(attempt, range(100, 150)))

    assert results.count("ok") == capacity
    assert results.count("full") == 50 - capacity

    attendees = store.get_event(event["id"])["attendees"]
    assert len(attendees) == capacity
    assert len(set(attendees)) == capacity


def test_concurrent_duplicate_registrations_count_once():
    store = MemoryStore()
    event = _make_event(store, capacity=10)
    claims = {"id": 42, "email": "u@x.com", "role": "user"}

    def attempt(_):
        try:
            service.register_for_event(store, claims, event["id"])
            return "ok"
        except AlreadyRegistered:
            return "dup"

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(20)))

    assert results.count("ok") == 1
    assert store.get_event(event["id"])["attendees"] == [42]
