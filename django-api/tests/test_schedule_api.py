"""Integration tests for the studio schedule API.

Run with: pytest tests/test_schedule_api.py -v
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from scheduling.models import Booking, ClassSession, TeacherBlockedTime
from studios.models import Location

START = datetime(2030, 1, 7, 9, 0, tzinfo=UTC)  # a Monday


def session_body(class_type, teacher, location, start=START, **extra) -> dict:
    body = {
        "classTypeId": str(class_type.id),
        "teacherId": str(teacher.id),
        "locationId": str(location.id),
        "startTime": start.isoformat(),
        "endTime": (start + timedelta(hours=1)).isoformat(),
        "capacity": 12,
    }
    body.update(extra)
    return body


def add_session(studio, class_type, teacher, location, start=START, group=None) -> ClassSession:
    return ClassSession.objects.create(
        studio=studio,
        class_type=class_type,
        teacher=teacher,
        location=location,
        start_time=start,
        end_time=start + timedelta(hours=1),
        capacity=10,
        recurring_group_id=group,
    )


@pytest.mark.django_db
class TestTenantResolution:
    """Tests for the X-Studio-Id header."""

    def test_missing_header_returns_401(self, api_client: APIClient):
        response = api_client.get("/api/studio/schedule")
        assert response.status_code == 401

    def test_unknown_studio_returns_401(self, api_client: APIClient):
        api_client.credentials(HTTP_X_STUDIO_ID=str(uuid4()))
        response = api_client.get("/api/studio/schedule")
        assert response.status_code == 401

    def test_malformed_studio_returns_401(self, api_client: APIClient):
        api_client.credentials(HTTP_X_STUDIO_ID="nope")
        response = api_client.get("/api/studio/schedule")
        assert response.status_code == 401


@pytest.mark.django_db
class TestScheduleList:
    """Tests for GET /api/studio/schedule"""

    def test_lists_sessions_with_booking_counts(
        self, studio_client: APIClient, studio, class_type, teacher, location, client_record
    ):
        session = add_session(studio, class_type, teacher, location)
        Booking.objects.create(studio=studio, client=client_record, class_session=session)
        response = studio_client.get("/api/studio/schedule")
        assert response.status_code == 200
        [item] = response.json()
        assert item["id"] == str(session.id)
        assert item["activeBookings"] == 1
        assert item["capacity"] == 10

    def test_filters_by_range(self, studio_client: APIClient, studio, class_type, teacher, location):
        add_session(studio, class_type, teacher, location)
        add_session(studio, class_type, teacher, location, start=START + timedelta(days=10))
        response = studio_client.get(
            "/api/studio/schedule",
            {"start": START.isoformat(), "end": (START + timedelta(days=1)).isoformat()},
        )
        assert len(response.json()) == 1


@pytest.mark.django_db
class TestScheduleCreate:
    """Tests for POST /api/studio/schedule"""

    def test_create_single_session(self, studio_client: APIClient, class_type, teacher, location):
        response = studio_client.post(
            "/api/studio/schedule", session_body(class_type, teacher, location), format="json"
        )
        assert response.status_code == 201
        assert response.json()["teacherId"] == str(teacher.id)
        assert ClassSession.objects.count() == 1

    def test_missing_fields_returns_400(self, studio_client: APIClient):
        response = studio_client.post("/api/studio/schedule", {"capacity": 3}, format="json")
        assert response.status_code == 400

    def test_missing_end_time_for_single_session_returns_400(
        self, studio_client: APIClient, class_type, teacher, location
    ):
        body = session_body(class_type, teacher, location)
        del body["endTime"]
        response = studio_client.post("/api/studio/schedule", body, format="json")
        assert response.status_code == 400

    def test_foreign_location_returns_400(self, studio_client: APIClient, other_studio, class_type, teacher):
        foreign = Location.objects.create(studio=other_studio, name="Not yours")
        response = studio_client.post(
            "/api/studio/schedule", session_body(class_type, teacher, foreign), format="json"
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REFERENCE"
        assert response.json()["fields"] == ["locationId"]

    def test_blocked_time_returns_409_with_conflicts(
        self, studio_client: APIClient, class_type, teacher, location
    ):
        TeacherBlockedTime.objects.create(
            teacher=teacher, start_time=START, end_time=START + timedelta(hours=4), reason="Training"
        )
        response = studio_client.post(
            "/api/studio/schedule", session_body(class_type, teacher, location), format="json"
        )
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "BLOCKED_TIME_CONFLICT"
        assert body["conflicts"][0]["type"] == "blocked_time"
        assert body["conflicts"][0]["reason"] == "Training"

    def test_double_booking_returns_409(
        self, studio_client: APIClient, studio, class_type, teacher, location
    ):
        existing = add_session(studio, class_type, teacher, location)
        response = studio_client.post(
            "/api/studio/schedule", session_body(class_type, teacher, location), format="json"
        )
        assert response.status_code == 409
        [conflict] = response.json()["conflicts"]
        assert conflict["type"] == "teacher"
        assert conflict["sessionId"] == str(existing.id)

    def test_create_recurring_series(self, studio_client: APIClient, class_type, teacher, location):
        body = session_body(
            class_type,
            teacher,
            location,
            recurring={"days": [1, 3], "endDate": "2030-01-16", "time": "18:30", "duration": 45},
        )
        del body["endTime"]
        response = studio_client.post("/api/studio/schedule", body, format="json")
        assert response.status_code == 201
        payload = response.json()
        assert payload["created"] == 4
        assert payload["skippedBlocked"] == 0
        assert payload["skippedConflicts"] == 0
        assert len(payload["sessions"]) == 4
        assert {s["recurringGroupId"] for s in payload["sessions"]} == {payload["recurringGroupId"]}
        first = ClassSession.objects.order_by("start_time").first()
        assert first.start_time == datetime(2030, 1, 7, 18, 30, tzinfo=UTC)
        assert first.end_time - first.start_time == timedelta(minutes=45)

    def test_recurring_with_bad_weekday_returns_400(self, studio_client: APIClient, class_type, teacher, location):
        body = session_body(
            class_type,
            teacher,
            location,
            recurring={"days": [9], "endDate": "2030-01-16", "time": "18:30", "duration": 45},
        )
        response = studio_client.post("/api/studio/schedule", body, format="json")
        assert response.status_code == 400

    def test_recurring_with_nothing_valid_returns_409(
        self, studio_client: APIClient, class_type, teacher, location
    ):
        TeacherBlockedTime.objects.create(
            teacher=teacher,
            start_time=datetime(2030, 1, 1, tzinfo=UTC),
            end_time=datetime(2030, 2, 1, tzinfo=UTC),
        )
        body = session_body(
            class_type,
            teacher,
            location,
            recurring={"days": [1], "endDate": "2030-01-14", "time": "09:00", "duration": 60},
        )
        response = studio_client.post("/api/studio/schedule", body, format="json")
        assert response.status_code == 409
        payload = response.json()
        assert payload["code"] == "NO_VALID_OCCURRENCES"
        assert [item["date"] for item in payload["skipped"]] == ["2030-01-07", "2030-01-14"]


@pytest.mark.django_db
class TestBulkDelete:
    """Tests for POST /api/studio/schedule/bulk-delete"""

    def test_deletes_sessions(self, studio_client: APIClient, studio, class_type, teacher, location):
        session = add_session(studio, class_type, teacher, location)
        response = studio_client.post(
            "/api/studio/schedule/bulk-delete", {"sessionIds": [str(session.id)]}, format="json"
        )
        assert response.status_code == 200
        assert response.json() == {"deleted": 1}

    def test_refuses_booked_sessions(
        self, studio_client: APIClient, studio, class_type, teacher, location, client_record
    ):
        group = uuid4()
        session = add_session(studio, class_type, teacher, location, group=group)
        Booking.objects.create(studio=studio, client=client_record, class_session=session)
        response = studio_client.post(
            "/api/studio/schedule/bulk-delete", {"recurringGroupId": str(group)}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["sessionsWithBookings"] == 1
        assert ClassSession.objects.count() == 1

    def test_requires_exactly_one_selector(self, studio_client: APIClient):
        response = studio_client.post("/api/studio/schedule/bulk-delete", {}, format="json")
        assert response.status_code == 400

    def test_unknown_sessions_return_404(self, studio_client: APIClient):
        response = studio_client.post(
            "/api/studio/schedule/bulk-delete", {"sessionIds": [str(uuid4())]}, format="json"
        )
        assert response.status_code == 404


@pytest.mark.django_db
class TestBulkReassign:
    """Tests for POST /api/studio/schedule/bulk-reassign"""

    def test_reassigns_location(
        self, studio_client: APIClient, studio, class_type, teacher, location, second_location
    ):
        group = uuid4()
        add_session(studio, class_type, teacher, location, group=group)
        add_session(studio, class_type, teacher, location, start=START + timedelta(days=7), group=group)
        response = studio_client.post(
            "/api/studio/schedule/bulk-reassign",
            {"recurringGroupId": str(group), "locationId": str(second_location.id)},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["updated"] == 2
        assert response.json()["sessionsWithBookings"] == 0
        assert set(ClassSession.objects.values_list("location_id", flat=True)) == {second_location.id}

    def test_requires_teacher_or_location(self, studio_client: APIClient, studio, class_type, teacher, location):
        session = add_session(studio, class_type, teacher, location)
        response = studio_client.post(
            "/api/studio/schedule/bulk-reassign", {"sessionIds": [str(session.id)]}, format="json"
        )
        assert response.status_code == 400

    def test_conflict_returns_409(
        self, studio_client: APIClient, studio, class_type, teacher, second_teacher, location, second_location
    ):
        moving = add_session(studio, class_type, teacher, location)
        add_session(studio, class_type, second_teacher, second_location)
        response = studio_client.post(
            "/api/studio/schedule/bulk-reassign",
            {"sessionIds": [str(moving.id)], "locationId": str(second_location.id)},
            format="json",
        )
        assert response.status_code == 409
        [conflict] = response.json()["conflicts"]
        assert conflict["type"] == "location"
        assert conflict["targetSessionId"] == str(moving.id)


@pytest.mark.django_db
class TestBlockedTimes:
    """Tests for GET /api/studio/blocked-times"""

    def test_lists_blocks_intersecting_range(self, studio_client: APIClient, teacher):
        TeacherBlockedTime.objects.create(
            teacher=teacher, start_time=START, end_time=START + timedelta(hours=2), reason="Physio"
        )
        TeacherBlockedTime.objects.create(
            teacher=teacher, start_time=START + timedelta(days=5), end_time=START + timedelta(days=6)
        )
        response = studio_client.get(
            "/api/studio/blocked-times",
            {
                "start": (START + timedelta(hours=1)).isoformat(),
                "end": (START + timedelta(days=1)).isoformat(),
            },
        )
        assert response.status_code == 200
        [block] = response.json()
        assert block["reason"] == "Physio"
        assert block["teacherId"] == str(teacher.id)
