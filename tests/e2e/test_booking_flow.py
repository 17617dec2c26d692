"""
End-to-end booking flow over HTTP.

Drives the ASGI app in-process with httpx.AsyncClient:
1. Health check
2. Availability check reports a booked room and suggests matches
3. Booking a suggested match succeeds
4. Repeating the booking is a conflict
5. Concurrent requests for one slot produce exactly one booking
6. The chat assistant lists the new booking

Usage:
    pytest tests/e2e -v
"""

import asyncio

import httpx
import pytest

from carespace.infra.store import init_store, reset_store
from carespace.main import app


@pytest.fixture
def store_installed(store):
    init_store(store)
    yield store
    reset_store()


def make_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://carespace.test")


class TestBookingFlow:
    """Full request flow against the temporary data set."""

    @pytest.mark.asyncio
    async def test_health(self, store_installed):
        async with make_client() as client:
            response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["data"]["spaces"] == 4

    @pytest.mark.asyncio
    async def test_check_then_book_match(self, store_installed):
        async with make_client() as client:
            check = await client.get(
                "/api/availability/check",
                params={"date": "2025-07-15", "time": "15:00", "duration": 1},
            )
            match = check.json()["data"]["optimal_matches"][0]

            payload = {
                "space_id": match["space"]["space_id"],
                "doctor_id": match["doctor"]["doctor_id"],
                "start_time": "2025-07-15T15:00:00",
                "end_time": "2025-07-15T16:00:00",
                "activity": "Consultation",
            }
            created = await client.post("/api/bookings", json=payload)
            repeated = await client.post("/api/bookings", json=payload)
            recheck = await client.get(
                "/api/availability/check",
                params={"date": "2025-07-15", "time": "15:00", "duration": 1},
            )

        assert (match["doctor"]["doctor_id"], match["space"]["space_id"]) == ("D1", "R1")
        assert created.status_code == 201
        assert repeated.status_code == 409
        assert repeated.json()["conflicts"][0]["id"] == created.json()["data"]["id"]

        r1 = next(
            s for s in recheck.json()["data"]["space_availability"] if s["space_id"] == "R1"
        )
        assert r1["available"] is False

    @pytest.mark.asyncio
    async def test_concurrent_requests_book_once(self, store_installed):
        payload = {
            "space_id": "R2",
            "start_time": "2025-07-21T10:00:00",
            "end_time": "2025-07-21T12:00:00",
        }

        async with make_client() as client:
            responses = await asyncio.gather(
                *(client.post("/api/bookings", json=payload) for _ in range(6))
            )
            listed = await client.get("/api/bookings/space/R2")

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 409, 409, 409, 409, 409]
        assert listed.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_chat_lists_new_booking(self, store_installed):
        async with make_client() as client:
            await client.post(
                "/api/bookings",
                json={
                    "space_id": "R2",
                    "doctor_id": "D3",
                    "start_time": "2025-07-16T09:00:00",
                    "end_time": "2025-07-16T11:00:00",
                    "activity": "Labwork",
                },
            )
            reply = await client.post(
                "/api/chat", json={"message": "what are my bookings?", "doctor_id": "D3"}
            )

        assert reply.status_code == 200
        assert "09:00-11:00 Research Lab (Labwork)" in reply.json()["message"]
