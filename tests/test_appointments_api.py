"""API tests for /appointments"""

import pytest


@pytest.fixture
def client_id(api):
    response = api.post("/clients", json={"name": "María López", "email": "Maria@Example.com"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def book(api, client_id):
    def make(start="2024-06-01T14:00", **extra):
        return api.post("/appointments", json={"clientId": client_id, "start": start, **extra})

    return make


class TestCreate:
    def test_create_returns_canonical_record(self, book):
        response = book(amount=80, notifications=[15, 15])
        assert response.status_code == 201
        data = response.json()
        assert data["start"] == "2024-06-01T14:00:00.000"
        assert data["clientName"] == "María López"
        assert data["status"] == "pending"
        assert data["payment"] == "unpaid"
        assert data["remaining"] == 80
        assert data["notifications"] == [15]
        assert data["overdue"] is False

    def test_date_without_time_is_noon(self, api, client_id):
        response = api.post("/appointments", json={"clientId": client_id, "date": "2024-06-03"})
        assert response.status_code == 201
        assert response.json()["start"] == "2024-06-03T12:00:00.000"

    def test_missing_date(self, api, client_id):
        response = api.post("/appointments", json={"clientId": client_id})
        assert response.status_code == 422
        assert response.json()["detail"] == "Please select a date"

    def test_conflict_is_409_with_blocking_id(self, book):
        first = book().json()
        response = book(start="2024-06-01T14:15")
        assert response.status_code == 409
        assert response.json()["conflictingId"] == first["id"]

    def test_profit_above_amount_is_422(self, book):
        assert book(amount=10, profit=20).status_code == 422

    def test_negative_notification_is_422(self, book):
        assert book(notifications=[-5]).status_code == 422

    def test_past_appointment_is_overdue(self, book):
        assert book(start="2024-05-31T10:00").json()["overdue"] is True


class TestTransitions:
    def test_complete_and_uncomplete(self, api, book):
        appointment_id = book(amount=100).json()["id"]

        completed = api.post(f"/appointments/{appointment_id}/complete").json()
        assert completed["status"] == "completed"
        assert completed["payment"] == "paid"
        assert completed["remaining"] == 0

        reopened = api.post(f"/appointments/{appointment_id}/uncomplete").json()
        assert reopened["status"] == "pending"
        assert reopened["payment"] == "unpaid"
        assert reopened["amount"] == 100

    def test_cancel_frees_the_slot(self, api, book):
        appointment_id = book().json()["id"]
        assert api.post(f"/appointments/{appointment_id}/cancel").json()["status"] == "cancelled"
        assert book(start="2024-06-01T14:15").status_code == 201

    def test_patch_keeps_unsent_fields(self, api, book):
        appointment_id = book(description="Windows", priority="high").json()["id"]
        response = api.patch(f"/appointments/{appointment_id}", json={"location": "Main St"})
        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "Main St"
        assert data["description"] == "Windows"
        assert data["priority"] == "high"

    def test_partial_payment(self, api, book):
        appointment_id = book(amount=100).json()["id"]
        response = api.post(
            f"/appointments/{appointment_id}/payment",
            json={"payment": "partial", "amountPaid": 25},
        )
        assert response.status_code == 200
        assert response.json()["remaining"] == 75

    def test_delete(self, api, book):
        appointment_id = book().json()["id"]
        assert api.delete(f"/appointments/{appointment_id}").json() == {"message": "Appointment deleted"}
        assert api.get(f"/appointments/{appointment_id}").status_code == 404

    def test_unknown_appointment_is_404(self, api):
        assert api.post("/appointments/nope/complete").status_code == 404
        assert api.delete("/appointments/nope").status_code == 404


class TestConflictCheck:
    def test_reports_conflict(self, api, book):
        first = book().json()
        data = api.post("/appointments/check-conflict", json={"start": "2024-06-01T14:20"}).json()
        assert data == {"conflict": True, "conflictingId": first["id"]}

    def test_excluding_self_is_free(self, api, book):
        first = book().json()
        data = api.post(
            "/appointments/check-conflict",
            json={"start": "2024-06-01T14:20", "excludeId": first["id"]},
        ).json()
        assert data["conflict"] is False

    def test_unreadable_start_is_422(self, api):
        response = api.post("/appointments/check-conflict", json={"start": "soon"})
        assert response.status_code == 422

    def test_missing_start_is_422(self, api):
        assert api.post("/appointments/check-conflict", json={}).status_code == 422
        assert api.post("/appointments/check-conflict", json={"start": None}).status_code == 422


class TestListing:
    @pytest.fixture
    def schedule(self, book):
        book(start="2024-06-02T10:00", priority="low")
        book(start="2024-06-03T10:00", priority="high")
        book(start="2024-06-04T10:00", priority="medium")
        book(start="2024-06-05T10:00", priority="high", status="completed")

    def test_active_sorted_and_windowed(self, api, schedule):
        data = api.get("/appointments").json()
        assert data["total"] == 3
        assert data["shown"] == 2
        assert data["remaining"] == 1
        assert data["hasMore"] is True
        assert [a["priority"] for a in data["appointments"]] == ["high", "medium"]

    def test_show_more_then_filter_change_resets(self, api, schedule):
        api.get("/appointments")
        assert api.post("/appointments/show-more").json() == {"revealCount": 4}
        assert api.get("/appointments").json()["shown"] == 3

        data = api.get("/appointments", params={"priority": "high"}).json()
        assert data["total"] == 1

        data = api.get("/appointments").json()
        assert data["shown"] == 2

    def test_completed_filter(self, api, schedule):
        data = api.get("/appointments", params={"status": "completed"}).json()
        assert [a["status"] for a in data["appointments"]] == ["completed"]

    def test_search_is_accent_insensitive(self, api, schedule):
        data = api.get("/appointments", params={"q": "maria"}).json()
        assert data["total"] == 3

    def test_unknown_status_filter_is_422(self, api):
        assert api.get("/appointments", params={"status": "someday"}).status_code == 422
