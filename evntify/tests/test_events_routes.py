import json


def test_create_event_success(client, signup, event_payload, bearer):
    token, user = signup()

    response = client.post("/api/events", json=event_payload, headers=bearer(token))

    assert response.status_code == 201
    data = response.get_json()
    assert data["title"] == "Tech Meetup"
    assert data["organizer"] == user["id"]
    assert data["attendees"] == []
    assert data["capacity"] == 2
    assert data["price"] == 10.0
    assert data["date"].startswith("2025-05-01")


def test_create_event_ignores_organizer_in_body(client, signup, event_payload, bearer):
    token, user = signup()

    payload = dict(event_payload, organizer=999, attendees=[1, 2, 3])
    response = client.post("/api/events", json=payload, headers=bearer(token))

    assert response.status_code == 201
    assert response.get_json()["organizer"] == user["id"]
    assert response.get_json()["attendees"] == []


def test_create_event_requires_token(client, event_payload):
    response = client.post("/api/events", json=event_payload)
    assert response.status_code == 401


def test_create_event_invalid_token(client, event_payload, bearer):
    response = client.post("/api/events", json=event_payload, headers=bearer("garbage"))
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid token"


def test_create_event_missing_fields(client, signup, bearer):
    token, _ = signup()

    response = client.post("/api/events", json={"title": "New Event"}, headers=bearer(token))

    assert response.status_code == 400
    assert "Missing required fields" in response.get_json()["message"]


def test_create_event_bad_values(client, signup, event_payload, bearer):
    token, _ = signup()

    for bad in ({"capacity": 0}, {"capacity": "ten"}, {"capacity": True},
                {"price": -1}, {"date": "next tuesday"}, {"title": "  "}):
        response = client.post("/api/events", json=dict(event_payload, **bad), headers=bearer(token))
        assert response.status_code == 400, bad


def test_create_event_rejects_non_finite_price(client, signup, event_payload, bearer):
    token, _ = signup()

    for value in ("NaN", "Infinity"):
        # json.dumps writes these as bare NaN / Infinity literals
        body = json.dumps(dict(event_payload, price=float(value)))
        response = client.post("/api/events", data=body, content_type="application/json", headers=bearer(token))
        assert response.status_code == 400, value

    assert client.get("/api/events").get_json() == []


def test_create_event_values_beyond_column_limits(client, signup, event_payload, bearer):
    token, _ = signup()

    for bad in ({"title": "t" * 201}, {"location": "l" * 301}, {"time": "9" * 51},
                {"capacity": 2147483648}, {"price": 100000000}):
        response = client.post("/api/events", json=dict(event_payload, **bad), headers=bearer(token))
        assert response.status_code == 400, bad

    edge = {"title": "t" * 200, "location": "l" * 300, "time": "9" * 50,
            "capacity": 2147483647, "price": 99999999.99}
    response = client.post("/api/events", json=dict(event_payload, **edge), headers=bearer(token))
    assert response.status_code == 201


def test_update_event_rejects_non_finite_price(client, signup, create_event, bearer):
    token, _ = signup()
    event = create_event(token)

    response = client.put(f"/api/events/{event['id']}", data='{"price": Infinity}',
                          content_type="application/json", headers=bearer(token))

    assert response.status_code == 400
    assert client.get(f"/api/events/{event['id']}").get_json()["price"] == 10.0


def test_list_events_sorted_by_date(client, signup, create_event):
    token, _ = signup()
    create_event(token, title="Late", date="2025-12-01")
    create_event(token, title="Early", date="2025-01-15")
    create_event(token, title="Middle", date="2025-06-30T09:00:00Z")

    response = client.get("/api/events")

    assert response.status_code == 200
    assert [e["title"] for e in response.get_json()] == ["Early", "Middle", "Late"]


def test_list_events_empty(client):
    response = client.get("/api/events")
    assert response.status_code == 200
    assert response.get_json() == []


def test_get_event_detail(client, signup, create_event):
    token, _ = signup()
    event = create_event(token)

    response = client.get(f"/api/events/{event['id']}")

    assert response.status_code == 200
    assert response.get_json()["title"] == "Tech Meetup"


def test_get_event_not_found(client):
    response = client.get("/api/events/42")
    assert response.status_code == 404
    assert response.get_json()["message"] == "Event not found"


def test_update_event_by_organizer(client, signup, create_event, bearer):
    token, _ = signup()
    event = create_event(token)

    response = client.put(
        f"/api/events/{event['id']}",
        json={"title": "Updated Title", "organizer": 999},
        headers=bearer(token),
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["title"] == "Updated Title"
    assert data["organizer"] == event["organizer"]
    assert data["location"] == "Room 101"


def test_update_event_forbidden_for_other_user(client, signup, create_event, bearer):
    owner_token, _ = signup(email="owner@x.com")
    other_token, _ = signup(name="Bob", email="bob@x.com")
    event = create_event(owner_token)

    response = client.put(
        f"/api/events/{event['id']}",
        json={"title": "Hijacked"},
        headers=bearer(other_token),
    )

    assert response.status_code == 403
    assert client.get(f"/api/events/{event['id']}").get_json()["title"] == "Tech Meetup"


def test_update_event_by_admin(client, signup, create_event, admin_token, bearer):
    owner_token, _ = signup()
    event = create_event(owner_token)

    response = client.put(
        f"/api/events/{event['id']}",
        json={"price": 0},
        headers=bearer(admin_token),
    )

    assert response.status_code == 200
    assert response.get_json()["price"] == 0.0


def test_update_event_not_found(client, signup, bearer):
    token, _ = signup()
    response = client.put("/api/events/42", json={"title": "x"}, headers=bearer(token))
    assert response.status_code == 404


def test_update_event_no_valid_fields(client, signup, create_event, bearer):
    token, _ = signup()
    event = create_event(token)

    response = client.put(f"/api/events/{event['id']}", json={"attendees": []}, headers=bearer(token))

    assert response.status_code == 400
    assert response.get_json()["message"] == "No valid fields to update"


def test_update_capacity_below_attendees(client, signup, create_event, bearer):
    owner_token, _ = signup(email="owner@x.com")
    b_token, _ = signup(name="B", email="b@x.com")
    event = create_event(owner_token, capacity=3)
    client.post(f"/api/events/{event['id']}/register", headers=bearer(owner_token))
    client.post(f"/api/events/{event['id']}/register", headers=bearer(b_token))

    response = client.put(f"/api/events/{event['id']}", json={"capacity": 1}, headers=bearer(owner_token))

    assert response.status_code == 400
    assert client.get(f"/api/events/{event['id']}").get_json()["capacity"] == 3


def test_delete_event(client, signup, create_event, bearer):
    token, _ = signup()
    event = create_event(token)

    response = client.delete(f"/api/events/{event['id']}", headers=bearer(token))

    assert response.status_code == 200
    assert response.get_json()["message"] == "Event deleted successfully"
    assert client.get(f"/api/events/{event['id']}").status_code == 404


def test_delete_event_forbidden(client, signup, create_event, bearer):
    owner_token, _ = signup(email="owner@x.com")
    other_token, _ = signup(name="Bob", email="bob@x.com")
    event = create_event(owner_token)

    response = client.delete(f"/api/events/{event['id']}", headers=bearer(other_token))

    assert response.status_code == 403
    assert client.get(f"/api/events/{event['id']}").status_code == 200


def test_delete_event_by_admin(client, signup, create_event, admin_token, bearer):
    owner_token, _ = signup()
    event = create_event(owner_token)

    response = client.delete(f"/api/events/{event['id']}", headers=bearer(admin_token))

    assert response.status_code == 200


def test_delete_event_requires_token(client, signup, create_event):
    token, _ = signup()
    event = create_event(token)

    assert client.delete(f"/api/events/{event['id']}").status_code == 401
