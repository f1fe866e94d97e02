"""
EstateHub Backend — HTTP Endpoint Tests
=========================================

What:  Drives the API through HTTPX + ASGITransport against in-memory SQLite.

What we test:
    ✅ Status codes and JSON shapes of every /residency and /user route
    ✅ camelCase wire format (userEmail, createdAt, bookedVisits, favResidenciesID)
    ✅ Error bodies from the global exception handlers
    ✅ Request ID propagation and the health check
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.exceptions import DatabaseError

from conftest import OWNER_EMAIL


async def register(client, email=OWNER_EMAIL, **extra):
    return await client.post("/user/register", json={"email": email, **extra})


class TestRegisterEndpoint:

    @pytest.mark.asyncio
    async def test_register_then_already_registered(self, test_client):
        first = await register(test_client, name="Olive Owner")
        assert first.status_code == 201
        body = first.json()
        assert body["message"] == "User registered successfully"
        assert body["user"]["email"] == OWNER_EMAIL
        assert body["user"]["bookedVisits"] == []
        assert body["user"]["favResidenciesID"] == []

        second = await register(test_client, name="Impostor")
        assert second.status_code == 200
        assert second.json()["message"] == "User already registered"

    @pytest.mark.asyncio
    async def test_register_rejects_bad_email(self, test_client):
        response = await register(test_client, email="not-an-email")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_rejects_double_at(self, test_client):
        response = await register(test_client, email="a@@b")
        assert response.status_code == 422

        listed = await test_client.post("/user/allFav", json={"email": "a@@b"})
        assert listed.status_code == 422


class TestResidencyEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, test_client, residency_payload):
        await register(test_client)

        created = await test_client.post("/residency/create", json=residency_payload)
        assert created.status_code == 201
        body = created.json()
        assert body["message"] == "Residency created successfully"
        residency = body["residency"]
        assert residency["userEmail"] == OWNER_EMAIL
        assert residency["facilities"] == {"bedrooms": 2, "bathrooms": 1, "parkings": 0}
        assert "createdAt" in residency and "updatedAt" in residency

        fetched = await test_client.get(f"/residency/{residency['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Sunny loft"

    @pytest.mark.asyncio
    async def test_duplicate_address_conflict(self, test_client, residency_payload):
        await register(test_client)
        first = await test_client.post("/residency/create", json=residency_payload)

        second = await test_client.post("/residency/create", json=residency_payload)

        assert second.status_code == 409
        assert second.json()["error"] == "uniqueness_violation"
        assert second.json()["message"] == "A residency with this address already exists"
        still_there = await test_client.get(f"/residency/{first.json()['residency']['id']}")
        assert still_there.status_code == 200

    @pytest.mark.asyncio
    async def test_create_for_unknown_owner(self, test_client, residency_payload):
        response = await test_client.post("/residency/create", json=residency_payload)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_create_requires_data_envelope(self, test_client, residency_payload):
        await register(test_client)
        response = await test_client.post("/residency/create", json=residency_payload["data"])
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_allresd_newest_first(self, test_client, residency_payload):
        await register(test_client)
        ids = []
        for n in range(3):
            payload = {"data": {**residency_payload["data"], "address": f"{n} Harbour Road"}}
            response = await test_client.post("/residency/create", json=payload)
            ids.append(response.json()["residency"]["id"])

        listed = await test_client.get("/residency/allresd")

        assert listed.status_code == 200
        assert [r["id"] for r in listed.json()] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_allresd_empty(self, test_client):
        response = await test_client.get("/residency/allresd")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, test_client):
        response = await test_client.get(f"/residency/{uuid4()}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_422(self, test_client):
        response = await test_client.get("/residency/not-a-uuid")
        assert response.status_code == 422


class TestBookingEndpoints:

    @pytest.mark.asyncio
    async def test_booking_lifecycle(self, test_client):
        await register(test_client)
        body = {"email": OWNER_EMAIL, "date": "2026-11-02"}

        booked = await test_client.post("/user/bookVisit/res-1", json=body)
        assert booked.status_code == 200
        assert booked.json()["message"] == "Your visit is booked successfully"

        again = await test_client.post("/user/bookVisit/res-1", json=body)
        assert again.status_code == 409
        assert again.json()["error"] == "duplicate_booking"
        assert again.json()["message"] == "This residency is already booked by you"

        listed = await test_client.post("/user/allBookings", json={"email": OWNER_EMAIL})
        assert listed.json() == {"bookedVisits": [{"id": "res-1", "date": "2026-11-02"}]}

        cancelled = await test_client.post("/user/removeBooking/res-1", json={"email": OWNER_EMAIL})
        assert cancelled.status_code == 200
        assert cancelled.json()["message"] == "Booking cancelled successfully"

        listed = await test_client.post("/user/allBookings", json={"email": OWNER_EMAIL})
        assert listed.json() == {"bookedVisits": []}

        missing = await test_client.post("/user/removeBooking/res-1", json={"email": OWNER_EMAIL})
        assert missing.status_code == 404
        assert missing.json()["message"] == "Booking not found"

    @pytest.mark.asyncio
    async def test_booking_requires_date(self, test_client):
        await register(test_client)
        response = await test_client.post("/user/bookVisit/res-1", json={"email": OWNER_EMAIL})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, test_client):
        response = await test_client.post("/user/allBookings", json={"email": "ghost@example.com"})
        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "user"


class TestFavoriteEndpoints:

    @pytest.mark.asyncio
    async def test_toggle_twice(self, test_client):
        await register(test_client)

        added = await test_client.post("/user/toFav/res-7", json={"email": OWNER_EMAIL})
        assert added.status_code == 200
        assert added.json()["action"] == "added"
        assert added.json()["user"]["favResidenciesID"] == ["res-7"]

        listed = await test_client.post("/user/allFav", json={"email": OWNER_EMAIL})
        assert listed.json() == {"favResidenciesID": ["res-7"]}

        removed = await test_client.post("/user/toFav/res-7", json={"email": OWNER_EMAIL})
        assert removed.json()["action"] == "removed"
        assert removed.json()["message"] == "Removed from favorites"

        listed = await test_client.post("/user/allFav", json={"email": OWNER_EMAIL})
        assert listed.json() == {"favResidenciesID": []}


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_database_error_passthrough(self, test_client, monkeypatch):
        async def broken(db):
            raise DatabaseError(message="connection reset by peer")

        monkeypatch.setattr("app.routes.residency.residency_service.list_residencies", broken)

        response = await test_client.get("/residency/allresd")

        assert response.status_code == 500
        assert response.json()["message"] == "connection reset by peer"

    @pytest.mark.asyncio
    async def test_database_error_hidden_when_configured(self, test_client, monkeypatch):
        async def broken(db):
            raise DatabaseError(message="connection reset by peer")

        monkeypatch.setattr("app.routes.residency.residency_service.list_residencies", broken)
        monkeypatch.setattr(settings, "expose_error_details", False)

        response = await test_client.get("/residency/allresd")

        assert response.status_code == 500
        assert "connection reset" not in response.text

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/residency/allresd", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/residency/allresd")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id_header(self, database, monkeypatch):
        from app.main import app

        async def broken(db):
            raise RuntimeError("boom")

        monkeypatch.setattr("app.routes.residency.residency_service.list_residencies", broken)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/residency/allresd", headers={"X-Request-ID": "trace-9"})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        assert response.json()["request_id"] == "trace-9"
        assert response.headers["X-Request-ID"] == "trace-9"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
