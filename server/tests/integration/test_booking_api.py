"""End-to-end tests for the booking routes."""

import pytest
from fakes import make_token

from hotel_booking.models import TicketStatus

PROBLEM_JSON = "application/problem+json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path,body",
    [
        ("GET", "/v1/booking", None),
        ("POST", "/v1/booking", {"roomId": 1}),
        ("PUT", "/v1/booking/1", {"roomId": 1}),
    ],
)
async def test_booking_routes_require_token(test_client, method, path, body):
    response = await test_client.request(method, path, json=body)

    assert response.status_code == 401
    assert response.headers["content-type"].startswith(PROBLEM_JSON)
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(test_client):
    response = await test_client.get("/v1/booking", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_without_session_is_rejected(test_client, factory):
    """A correctly signed token is refused once its session is gone."""
    user = await factory.user()
    headers = {"Authorization": f"Bearer {make_token(user.id)}"}

    response = await test_client.get("/v1/booking", headers=headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_rejected(test_client, factory):
    user = await factory.user()
    headers = await factory.login(user)
    headers["Authorization"] = headers["Authorization"].replace("Bearer", "Basic")

    response = await test_client.get("/v1/booking", headers=headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_booking_without_booking_is_404(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)

    response = await test_client.get("/v1/booking", headers=headers)

    assert response.status_code == 404
    assert response.headers["content-type"].startswith(PROBLEM_JSON)
    data = response.json()
    assert data["status"] == 404
    assert data["instance"] == "/v1/booking"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"roomId": "abc"}, {"room": 1}])
async def test_create_with_invalid_body_is_400(test_client, factory, body):
    user = await factory.eligible_user()
    headers = await factory.login(user)

    response = await test_client.post("/v1/booking", json=body, headers=headers)

    assert response.status_code == 400
    data = response.json()
    assert data["title"] == "Validation Error"
    assert data["violations"]
    assert any("roomId" in v["path"] for v in data["violations"])


@pytest.mark.asyncio
async def test_create_accepts_numeric_string_room_id(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)
    room = await factory.room(await factory.hotel())

    response = await test_client.post("/v1/booking", json={"roomId": str(room.id)}, headers=headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_create_without_enrollment_is_403(test_client, factory):
    user = await factory.user()
    headers = await factory.login(user)
    room = await factory.room(await factory.hotel())

    response = await test_client.post("/v1/booking", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert response.headers["content-type"].startswith(PROBLEM_JSON)
    data = response.json()
    assert data["code"] == "ENROLLMENT_NOT_FOUND"
    assert data["reason"] == "enrollment not found"


@pytest.mark.asyncio
async def test_create_with_unpaid_ticket_is_403(test_client, factory):
    user = await factory.user()
    enrollment = await factory.enrollment(user)
    await factory.ticket(enrollment, await factory.ticket_type(), status=TicketStatus.RESERVED)
    headers = await factory.login(user)
    room = await factory.room(await factory.hotel())

    response = await test_client.post("/v1/booking", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert response.json()["reason"] == "ticket not paid"


@pytest.mark.asyncio
async def test_create_in_missing_room_is_404(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)

    response = await test_client.post("/v1/booking", json={"roomId": 999}, headers=headers)

    assert response.status_code == 404
    assert response.json()["resource_type"] == "room"


@pytest.mark.asyncio
async def test_create_in_full_room_is_403(test_client, factory):
    room = await factory.room(await factory.hotel(), capacity=1)
    await factory.booking(await factory.user(), room)
    user = await factory.eligible_user()
    headers = await factory.login(user)

    response = await test_client.post("/v1/booking", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert response.json()["code"] == "ROOM_FULL"


@pytest.mark.asyncio
async def test_create_get_and_move_booking(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)
    hotel = await factory.hotel()
    room_a = await factory.room(hotel, capacity=3)
    room_b = await factory.room(hotel, capacity=2)

    response = await test_client.post("/v1/booking", json={"roomId": room_a.id}, headers=headers)
    assert response.status_code == 200
    booking_id = response.json()["bookingId"]
    assert isinstance(booking_id, int) and booking_id > 0

    response = await test_client.get("/v1/booking", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["bookingId"] == booking_id
    assert data["Room"]["id"] == room_a.id
    assert data["Room"]["hotelId"] == hotel.id
    assert data["Room"]["capacity"] == 3
    assert {"name", "createdAt", "updatedAt"} <= set(data["Room"])

    response = await test_client.put(f"/v1/booking/{booking_id}", json={"roomId": room_b.id}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"bookingId": booking_id}

    response = await test_client.get("/v1/booking", headers=headers)
    assert response.json()["Room"]["id"] == room_b.id


@pytest.mark.asyncio
async def test_move_someone_elses_booking_is_403(test_client, factory):
    hotel = await factory.hotel()
    room_a = await factory.room(hotel)
    room_b = await factory.room(hotel)

    owner = await factory.eligible_user()
    owners_booking = await factory.booking(owner, room_a)
    caller = await factory.eligible_user()
    await factory.booking(caller, room_a)
    headers = await factory.login(caller)

    response = await test_client.put(
        f"/v1/booking/{owners_booking.id}", json={"roomId": room_b.id}, headers=headers
    )

    assert response.status_code == 403
    assert response.json()["code"] == "BOOKING_NOT_OWNED"


@pytest.mark.asyncio
async def test_move_without_booking_is_403(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)
    room = await factory.room(await factory.hotel())

    response = await test_client.put("/v1/booking/1", json={"roomId": room.id}, headers=headers)

    assert response.status_code == 403
    assert response.json()["code"] == "BOOKING_NOT_FOUND"


@pytest.mark.asyncio
async def test_booking_metrics_are_exported(test_client, factory):
    user = await factory.eligible_user()
    headers = await factory.login(user)
    room = await factory.room(await factory.hotel(), capacity=1)
    await test_client.post("/v1/booking", json={"roomId": room.id}, headers=headers)

    other = await factory.eligible_user()
    other_headers = await factory.login(other)
    await test_client.post("/v1/booking", json={"roomId": room.id}, headers=other_headers)

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert "bookings_created_total" in response.text
    assert 'booking_rejections_total{reason="ROOM_FULL"}' in response.text
