"""HTTP tests for the API routes, against a temporary data set."""

import pytest
from fastapi.testclient import TestClient

from carespace.core.errors import StorageFailure
from carespace.infra.store import init_store, reset_store
from carespace.main import app


@pytest.fixture
def client(store):
    """Client bound to the temporary store (lifespan not run)."""
    init_store(store)
    yield TestClient(app)
    reset_store()


class TestHealth:
    """Test health and root endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["data"]["doctors"] == 3
        assert body["data"]["doctor_calendar_entries"] == 2

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"


class TestDoctorRoutes:
    """Test doctor endpoints."""

    def test_list(self, client):
        body = client.get("/api/doctors").json()
        assert body["success"] is True
        assert body["count"] == 3
        assert body["data"][0]["id"] == "D1"

    @pytest.mark.parametrize("path", ["/api/doctors/available", "/api/doctors/with-office"])
    def test_with_office(self, client, path):
        body = client.get(path).json()
        assert [d["id"] for d in body["data"]] == ["D1"]

    def test_by_specialty(self, client):
        body = client.get("/api/doctors/specialty/cardio").json()
        assert [d["id"] for d in body["data"]] == ["D2"]

    def test_get_one(self, client):
        assert client.get("/api/doctors/D3").json()["data"]["name"] == "Dr. Chen Li"

    def test_unknown_doctor(self, client):
        response = client.get("/api/doctors/D99")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Not found"

    def test_calendar(self, client):
        body = client.get("/api/doctors/D1/calendar").json()
        assert body["count"] == 1
        assert body["data"][0]["time"] == "09:00-11:00"

    def test_empty_calendar_is_404(self, client):
        assert client.get("/api/doctors/D3/calendar").status_code == 404

    def test_calendar_range(self, client):
        response = client.get(
            "/api/doctors/D1/calendar/range",
            params={"start_date": "2025-07-11", "end_date": "2025-07-31"},
        )
        assert response.json()["count"] == 0

    def test_calendar_range_invalid(self, client):
        response = client.get(
            "/api/doctors/D1/calendar/range",
            params={"start_date": "soon", "end_date": "2025-07-31"},
        )
        assert response.status_code == 400

    def test_availability_with_time(self, client):
        busy = client.get(
            "/api/doctors/D1/availability/2025-07-10",
            params={"time": "10:00", "duration": 0.5},
        ).json()["data"]
        free = client.get(
            "/api/doctors/D1/availability/2025-07-10",
            params={"time": "11:00", "duration": 1},
        ).json()["data"]
        assert busy["available"] is False
        assert free["available"] is True

    def test_availability_off_day(self, client):
        data = client.get("/api/doctors/D2/availability/2025-07-15").json()["data"]
        assert data["available"] is False

    def test_all_calendars(self, client):
        assert client.get("/api/doctor-calendars").json()["count"] == 2


class TestSpaceRoutes:
    """Test space endpoints."""

    def test_list(self, client):
        assert client.get("/api/spaces").json()["count"] == 4

    def test_bookable(self, client):
        body = client.get("/api/spaces/bookable").json()
        assert [s["id"] for s in body["data"]] == ["R1", "R2", "R3"]

    def test_by_category(self, client):
        body = client.get("/api/spaces/category/research").json()
        assert [s["id"] for s in body["data"]] == ["R2"]

    def test_unknown_space(self, client):
        assert client.get("/api/spaces/R99").status_code == 404


class TestBookingRoutes:
    """Test booking endpoints."""

    def payload(self, **overrides) -> dict:
        data = {
            "space_id": "R1",
            "doctor_id": "D1",
            "start_time": "2025-07-15T15:00:00",
            "end_time": "2025-07-15T16:00:00",
            "activity": "Consultation",
        }
        data.update(overrides)
        return data

    def test_list(self, client):
        body = client.get("/api/bookings").json()
        assert body["count"] == 1
        assert body["data"][0]["id"] == "BK1"

    def test_list_filters(self, client):
        assert client.get("/api/bookings", params={"space_id": "R2"}).json()["count"] == 0
        assert client.get("/api/bookings/space/R1").json()["count"] == 1
        assert client.get("/api/bookings/date/2025-07-15").json()["count"] == 1
        assert client.get("/api/bookings/date/2025-07-16").json()["count"] == 0

    def test_list_invalid_date(self, client):
        assert client.get("/api/bookings/date/someday").status_code == 400

    def test_create(self, client):
        response = client.post("/api/bookings", json=self.payload())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["space_id"] == "R1"
        assert data["duration_hours"] == 1.0
        assert client.get("/api/bookings").json()["count"] == 2

    def test_conflict(self, client):
        response = client.post(
            "/api/bookings",
            json=self.payload(start_time="2025-07-15T13:30:00", end_time="2025-07-15T14:30:00"),
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Booking conflict"
        assert [b["id"] for b in body["conflicts"]] == ["BK1"]
        assert client.get("/api/bookings").json()["count"] == 1

    def test_invalid_interval(self, client):
        response = client.post(
            "/api/bookings",
            json=self.payload(end_time="2025-07-15T15:00:00"),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid interval"

    def test_not_bookable(self, client):
        response = client.post("/api/bookings", json=self.payload(space_id="R4"))
        assert response.status_code == 400
        assert response.json()["error"] == "Space not bookable"

    def test_unknown_space(self, client):
        response = client.post("/api/bookings", json=self.payload(space_id="R99"))
        assert response.status_code == 404

    def test_missing_fields(self, client):
        response = client.post("/api/bookings", json={"space_id": "R1"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input"

    def test_duration_must_match_interval(self, client):
        response = client.post("/api/bookings", json=self.payload(duration=5))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input"
        assert client.get("/api/bookings").json()["count"] == 1

    def test_wrong_type(self, client):
        response = client.post("/api/bookings", json=self.payload(duration="long"))
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_persistence_unconfirmed(self, client, monkeypatch):
        def fail(*args, **kwargs):
            raise StorageFailure("disk full")

        monkeypatch.setattr("carespace.infra.store.write_csv_atomic", fail)

        response = client.post("/api/bookings", json=self.payload())

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["data"]["space_id"] == "R1"


class TestAvailabilityRoutes:
    """Test the availability check endpoint."""

    def test_check(self, client):
        response = client.get(
            "/api/availability/check",
            params={"date": "2025-07-15", "time": "13:30", "duration": 1},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        r1 = next(s for s in data["space_availability"] if s["space_id"] == "R1")
        assert r1["available"] is False
        assert len(r1["conflicting_bookings"]) == 1
        assert data["summary"]["total_spaces"] == 3

    def test_missing_date(self, client):
        response = client.get("/api/availability/check", params={"time": "13:30"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input"

    @pytest.mark.parametrize("duration", ["nan", "inf", "1e12"])
    def test_invalid_duration(self, client, duration):
        response = client.get(
            "/api/availability/check",
            params={"date": "2025-07-15", "time": "10:00", "duration": duration},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input"


class TestChatRoutes:
    """Test chat endpoints."""

    def test_search_doctors(self, client):
        body = client.get("/api/chatbot/search-doctors", params={"query": "chen"}).json()
        assert [d["id"] for d in body["data"]] == ["D3"]
        assert body["query"] == "chen"

    def test_available_spaces(self, client):
        body = client.get(
            "/api/chatbot/available-spaces",
            params={"date": "2025-07-15", "time": "14:30"},
        ).json()
        assert [s["id"] for s in body["data"]] == ["R2", "R3"]

    def test_suggestions(self, client):
        response = client.get(
            "/api/chatbot/suggestions",
            params={"specialty": "pediatric", "date": "2025-07-15", "time": "14:30"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [d["id"] for d in data["doctors"]] == ["D1"]
        assert data["doctor_availability"][0]["available"] is True
        assert [s["id"] for s in data["spaces"]] == ["R2", "R3"]
        assert data["alternative_slots"][0]["space"]["id"] == "R1"
        assert len(data["alternative_slots"][0]["alternatives"]) == 3
        assert "**Available spaces:** 2 found" in data["message"]
        assert data["request_details"]["specialty"] == "pediatric"

    def test_suggestions_invalid_duration(self, client):
        response = client.get(
            "/api/chatbot/suggestions",
            params={"date": "2025-07-15", "time": "14:30", "duration": "nan"},
        )
        assert response.status_code == 400

    def test_chat_greeting(self, client):
        response = client.post("/api/chat", json={"message": "hello"})
        assert response.status_code == 200
        assert response.json()["intent"] == "greeting"

    def test_chat_my_bookings(self, client):
        body = client.post(
            "/api/chat", json={"message": "show my bookings", "doctor_id": "D1"}
        ).json()
        assert "Consultation Room A" in body["message"]

    def test_chat_availability(self, client):
        body = client.post(
            "/api/chat", json={"message": "research on 2025-07-15 at 9am"}
        ).json()
        assert body["intent"] == "booking_request"
        assert body["availability"]["requested_start"] == "2025-07-15T09:00:00"

    def test_empty_message_rejected(self, client):
        assert client.post("/api/chat", json={"message": ""}).status_code == 422


class TestStatsRoutes:
    """Test statistics endpoints."""

    def test_stats(self, client):
        data = client.get("/api/stats").json()["data"]
        assert data["doctors"]["total"] == 3
        assert data["spaces"]["bookable"] == 3

    def test_specialties(self, client):
        data = client.get("/api/stats/specialties").json()["data"]
        assert data["Pediatric"]["count"] == 1
