"""Tests API / API tests (SQLite temporaire / temporary SQLite database)."""

import json
import logging

import pytest

from app.main import JSONFormatter
from app.models.horse import Horse
from app.models.provider import Provider, Service
from app.models.user import User, UserType
from app.utils.auth import create_access_token
from fakes import auth_headers

CUSTOMER, PROVIDER_USER, ADMIN, STRANGER = 1, 2, 3, 4
MONDAY = "2030-01-07"


@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        async with session.begin():
            session.add_all([
                User(id=CUSTOMER, email="client@example.com", user_type=UserType.CUSTOMER, is_active=True),
                User(id=PROVIDER_USER, email="marechal@example.com", user_type=UserType.PROVIDER, is_active=True),
                User(id=ADMIN, email="admin@example.com", user_type=UserType.ADMIN, is_active=True),
                User(id=STRANGER, email="autre@example.com", user_type=UserType.CUSTOMER, is_active=True),
            ])
            await session.flush()
            session.add(Provider(
                id=1, user_id=PROVIDER_USER, business_name="Forge du Val", city="Paris",
                latitude=48.85, longitude=2.35, is_active=True, accepting_new_customers=True,
                recurring_enabled=True, max_series_occurrences=12,
            ))
            await session.flush()
            session.add(Service(
                id=1, provider_id=1, name="Parage", duration_minutes=60, price=80,
                recommended_interval_weeks=6, is_active=True,
            ))
            session.add(Horse(id=1, owner_id=CUSTOMER, name="Tornado"))


def booking_payload(**overrides):
    payload = {"provider_id": 1, "service_id": 1, "booking_date": MONDAY, "start_time": "10:00"}
    payload.update(overrides)
    return payload


async def test_health(client):
    resp = await client.get("/api/", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


async def test_token_required(client, seeded):
    resp = await client.post("/api/bookings/", json=booking_payload())
    assert resp.status_code in (401, 403)

    resp = await client.post("/api/bookings/", json=booking_payload(), headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401

    expired = create_access_token(CUSTOMER, expires_minutes=-5)
    resp = await client.post("/api/bookings/", json=booking_payload(), headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401


async def test_booking_flow(client, seeded):
    check = {"provider_id": 1, "booking_date": MONDAY, "start_time": "10:00", "service_id": 1}
    resp = await client.post("/api/availability/check", json=check, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 200
    assert resp.json()["available"] is True

    resp = await client.post("/api/bookings/", json=booking_payload(horse_id=1), headers=auth_headers(CUSTOMER))
    assert resp.status_code == 201
    booking = resp.json()
    assert booking["end_time"] == "11:00"
    assert booking["status"] == "pending"
    assert booking["customer_id"] == CUSTOMER

    resp = await client.post("/api/availability/check", json=check, headers=auth_headers(STRANGER))
    assert resp.json() == {
        "available": False,
        "reason": "slot already booked",
        "code": "SLOT_CONFLICT",
        "required_gap_minutes": None,
        "actual_gap_minutes": None,
    }

    resp = await client.post("/api/bookings/", json=booking_payload(start_time="10:30"), headers=auth_headers(STRANGER))
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "SLOT_CONFLICT"

    # Créneau adjacent accepté / Adjacent slot accepted
    resp = await client.post("/api/bookings/", json=booking_payload(start_time="11:00"), headers=auth_headers(STRANGER))
    assert resp.status_code == 201

    resp = await client.get(f"/api/bookings/{booking['id']}", headers=auth_headers(STRANGER))
    assert resp.status_code == 403
    resp = await client.get(f"/api/bookings/{booking['id']}", headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 200

    resp = await client.patch(
        f"/api/bookings/{booking['id']}/status", json={"status": "confirmed"}, headers=auth_headers(PROVIDER_USER)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = await client.patch(
        f"/api/bookings/{booking['id']}/status", json={"status": "pending"}, headers=auth_headers(CUSTOMER)
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "INVALID_STATUS_TRANSITION"

    resp = await client.patch("/api/bookings/999/status", json={"status": "cancelled"}, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 404


async def test_booking_rejections(client, seeded):
    resp = await client.post("/api/bookings/", json=booking_payload(start_time="25:00"), headers=auth_headers(CUSTOMER))
    assert resp.status_code == 422

    resp = await client.post(
        "/api/bookings/", json=booking_payload(end_time="09:00"), headers=auth_headers(CUSTOMER)
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "INVALID_TIMES"

    resp = await client.post("/api/bookings/", json=booking_payload(), headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "SELF_BOOKING"

    check = {"provider_id": 1, "booking_date": MONDAY, "start_time": "10:00"}
    resp = await client.post("/api/availability/check", json=check, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 422


async def test_series_flow(client, seeded):
    series = {
        "provider_id": 1, "service_id": 1, "first_booking_date": MONDAY, "start_time": "10:00",
        "total_occurrences": 3, "interval_weeks": 2, "horse_id": 1,
    }
    resp = await client.post("/api/booking-series/", json=series, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "RECURRING_FEATURE_OFF"

    resp = await client.put(
        "/api/feature-flags/recurring_bookings", json={"enabled": True}, headers=auth_headers(CUSTOMER)
    )
    assert resp.status_code == 403
    resp = await client.put("/api/feature-flags/recurring_bookings", json={"enabled": True}, headers=auth_headers(ADMIN))
    assert resp.json() == {"recurring_bookings": True}
    resp = await client.get("/api/feature-flags/", headers=auth_headers(ADMIN))
    assert resp.json()["recurring_bookings"] is True

    # La 2e occurrence est déjà prise / The 2nd occurrence is already taken
    resp = await client.post(
        "/api/bookings/", json=booking_payload(booking_date="2030-01-21"), headers=auth_headers(STRANGER)
    )
    assert resp.status_code == 201

    resp = await client.post("/api/booking-series/", json=series, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 201
    data = resp.json()
    assert [b["booking_date"] for b in data["created_bookings"]] == ["2030-01-07", "2030-02-04"]
    assert [(s["date"], s["reason"]) for s in data["skipped_dates"]] == [("2030-01-21", "SLOT_CONFLICT")]
    assert data["series"]["created_count"] == 2
    assert data["series"]["status"] == "active"
    series_id = data["series"]["id"]
    assert all(b["series_id"] == series_id for b in data["created_bookings"])

    resp = await client.post(f"/api/booking-series/{series_id}/cancel", headers=auth_headers(STRANGER))
    assert resp.status_code == 403

    resp = await client.post(
        f"/api/booking-series/{series_id}/cancel",
        json={"cancellation_message": "Déménagement"},
        headers=auth_headers(CUSTOMER),
    )
    assert resp.status_code == 200
    assert resp.json() == {"cancelled_count": 2}

    first_id = data["created_bookings"][0]["id"]
    resp = await client.get(f"/api/bookings/{first_id}", headers=auth_headers(CUSTOMER))
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["cancellation_message"] == "Déménagement"

    resp = await client.post("/api/booking-series/999/cancel", headers=auth_headers(CUSTOMER))
    assert resp.status_code == 404


async def test_series_invalid_occurrences(client, seeded):
    await client.put("/api/feature-flags/recurring_bookings", json={"enabled": True}, headers=auth_headers(ADMIN))
    series = {
        "provider_id": 1, "service_id": 1, "first_booking_date": MONDAY, "start_time": "10:00",
        "total_occurrences": 13,
    }
    resp = await client.post("/api/booking-series/", json=series, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "INVALID_OCCURRENCES"
    assert resp.json()["detail"]["max_occurrences"] == 12


async def test_provider_books_series_for_customer(client, seeded):
    await client.put("/api/feature-flags/recurring_bookings", json={"enabled": True}, headers=auth_headers(ADMIN))
    series = {
        "provider_id": 1, "service_id": 1, "first_booking_date": MONDAY, "start_time": "10:00",
        "total_occurrences": 3, "interval_weeks": 4, "customer_id": CUSTOMER,
    }
    resp = await client.post("/api/booking-series/", json=series, headers=auth_headers(STRANGER))
    assert resp.status_code == 403

    resp = await client.post("/api/booking-series/", json=series, headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 201
    data = resp.json()
    assert data["series"]["customer_id"] == CUSTOMER
    assert data["series"]["created_by_provider_id"] == 1
    assert data["series"]["created_count"] == 3
    assert all(b["created_by_provider_id"] == 1 for b in data["created_bookings"])

    # Sous son propre nom / Under the provider's own account
    resp = await client.post(
        "/api/booking-series/",
        json={**series, "start_time": "14:00", "customer_id": PROVIDER_USER},
        headers=auth_headers(PROVIDER_USER),
    )
    assert resp.status_code == 201
    assert resp.json()["skipped_dates"] == []

    # Le client peut annuler la série saisie pour lui / The customer may cancel the series booked for them
    resp = await client.post(f"/api/booking-series/{data['series']['id']}/cancel", headers=auth_headers(CUSTOMER))
    assert resp.status_code == 200


async def test_provider_manual_booking(client, seeded):
    resp = await client.post(
        "/api/bookings/", json=booking_payload(customer_id=CUSTOMER), headers=auth_headers(PROVIDER_USER)
    )
    assert resp.status_code == 201
    assert resp.json()["customer_id"] == CUSTOMER
    assert resp.json()["created_by_provider_id"] == 1

    resp = await client.post(
        "/api/bookings/", json=booking_payload(start_time="14:00", customer_id=CUSTOMER), headers=auth_headers(STRANGER)
    )
    assert resp.status_code == 403


async def create_order(client, **overrides):
    payload = {
        "service_type": "parage",
        "address": "Haras",
        "latitude": 48.86,
        "longitude": 2.35,
        "date_from": "2030-01-01",
        "date_to": "2030-01-31",
    }
    payload.update(overrides)
    resp = await client.post("/api/route-orders/", json=payload, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 201
    return resp.json()["id"]


async def test_route_flow(client, seeded):
    near = await create_order(client, address="Écurie A")
    urgent = await create_order(client, address="Écurie B", latitude=48.87, longitude=2.36, priority="urgent")
    far = await create_order(client, address="Lyon", latitude=45.76, longitude=4.83)

    resp = await client.get(
        "/api/route-orders/available", params={"date": "2030-01-10", "radius_km": 50},
        headers=auth_headers(PROVIDER_USER),
    )
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [urgent, near]

    resp = await client.get("/api/route-orders/available", headers=auth_headers(CUSTOMER))
    assert resp.status_code == 403

    route = {"route_date": "2030-01-10", "start_time": "08:00", "order_ids": [near, urgent]}
    resp = await client.post("/api/routes/", json=route, headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 201
    data = resp.json()
    assert [s["route_order_id"] for s in data["stops"]] == [near, urgent]
    assert [s["stop_order"] for s in data["stops"]] == [1, 2]
    assert data["stops"][0]["estimated_arrival"] == "2030-01-10T08:00"
    assert data["stops"][0]["estimated_departure"] == "2030-01-10T09:00"
    assert data["stops"][0]["distance_from_previous_km"] is None
    assert data["stops"][1]["distance_from_previous_km"] > 0
    assert data["total_distance_km"] > 0

    resp = await client.get(f"/api/routes/{data['id']}", headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 200
    assert sorted(s["route_order_id"] for s in resp.json()["stops"]) == sorted([near, urgent])

    resp = await client.post(
        "/api/routes/", json={**route, "order_ids": [urgent, far]}, headers=auth_headers(PROVIDER_USER)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "ORDERS_UNAVAILABLE"
    assert resp.json()["detail"]["unavailable_order_ids"] == [urgent]

    resp = await client.get("/api/route-orders/available", headers=auth_headers(PROVIDER_USER))
    assert [o["id"] for o in resp.json()] == [far]


async def test_route_planning_flag_off(client, seeded):
    order = await create_order(client)
    await client.put("/api/feature-flags/route_planning", json={"enabled": False}, headers=auth_headers(ADMIN))
    route = {"route_date": "2030-01-10", "start_time": "08:00", "order_ids": [order]}
    resp = await client.post("/api/routes/", json=route, headers=auth_headers(PROVIDER_USER))
    assert resp.status_code == 404


async def test_horse_interval_override(client, seeded):
    params = {"provider_id": 1, "service_id": 1, "horse_id": 1}
    resp = await client.get("/api/intervals/resolve", params=params, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 200
    assert resp.json()["effective_weeks"] == 6

    override = {"provider_id": 1, "service_id": 1, "revisit_interval_weeks": 8}
    resp = await client.put("/api/horses/1/interval", json=override, headers=auth_headers(STRANGER))
    assert resp.status_code == 404
    resp = await client.put("/api/horses/1/interval", json=override, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 200
    assert resp.json()["revisit_interval_weeks"] == 8

    # Remplacement, pas de doublon / Replaced, not duplicated
    resp = await client.put(
        "/api/horses/1/interval", json={**override, "revisit_interval_weeks": 10}, headers=auth_headers(CUSTOMER)
    )
    assert resp.status_code == 200

    resp = await client.get("/api/intervals/resolve", params=params, headers=auth_headers(CUSTOMER))
    assert resp.json() == {
        "horse_id": 1, "provider_id": 1, "service_id": 1, "default_weeks": 6, "effective_weeks": 10,
    }


async def test_due_reminders(client, seeded):
    resp = await client.post("/api/bookings/", json=booking_payload(horse_id=1), headers=auth_headers(CUSTOMER))
    booking_id = resp.json()["id"]
    for status in ("confirmed", "completed"):
        resp = await client.patch(
            f"/api/bookings/{booking_id}/status", json={"status": status}, headers=auth_headers(PROVIDER_USER)
        )
        assert resp.status_code == 200

    resp = await client.get("/api/reminders/due", params={"today": "2030-01-01"}, headers=auth_headers(CUSTOMER))
    assert resp.status_code == 403

    resp = await client.get("/api/reminders/due", params={"today": "2030-01-01"}, headers=auth_headers(ADMIN))
    assert resp.status_code == 200
    [reminder] = resp.json()
    assert reminder["booking_id"] == booking_id
    assert reminder["interval_weeks"] == 6
    assert reminder["horse_id"] == 1

    resp = await client.get("/api/reminders/due", params={"today": "2000-01-01"}, headers=auth_headers(ADMIN))
    assert resp.json() == []


def test_json_log_formatter():
    record = logging.LogRecord("equiroute", logging.INFO, __file__, 1, "GET %s -> %d", ("/api/", 200), None)
    record.request_id = "abc-123"
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "GET /api/ -> 200"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "abc-123"
