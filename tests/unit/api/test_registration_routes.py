"""Unit tests for the registration route."""

from collections.abc import Callable
from typing import Any

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from devcourses.entity_store import Commission, Course, EntityStore


def _payload(course: Course, commission: Commission, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "course_id": course.id,
        "commission_id": commission.id,
        "full_name": "Kim Lee",
        "pronouns": "they/them",
        "email": "kim.lee@example.com",
        "external_handle": "kimlee#0042",
        "community_affiliation": "no",
        "data_consent": True,
        "newsletter": False,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestCreateRegistration:
    """Tests for POST /api/v1/registrations."""

    def test_register(
        self,
        store: EntityStore,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
    ) -> None:
        """Registration is stored and one seat taken."""
        commission = make_commission()

        response = client.post("/api/v1/registrations", json=_payload(course, commission))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["commission_id"] == commission.id
        assert data["community_affiliation"] == "no"
        assert store.get_commission(commission.id).current_enrollment == 1

    def test_full_commission_conflict(
        self,
        store: EntityStore,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """A full commission returns 409 and takes nothing."""
        commission = make_commission(max_capacity=20)
        fill_seats(commission.id, 20)

        response = client.post("/api/v1/registrations", json=_payload(course, commission))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {
            "data": None,
            "error": "No seats available in this commission",
        }
        assert store.get_commission(commission.id).current_enrollment == 20
        assert store.list_registrations() == []

    def test_cancelled_commission_conflict(
        self,
        store: EntityStore,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
    ) -> None:
        """Cancelled commissions return 409."""
        commission = make_commission()
        store.update_commission(commission.id, is_active=False, cancel_reason="Closed")

        response = client.post("/api/v1/registrations", json=_payload(course, commission))

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_inactive_course_conflict(
        self,
        store: EntityStore,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
    ) -> None:
        """Inactive courses return 409."""
        commission = make_commission()
        store.update_course(course.id, is_active=False)

        response = client.post("/api/v1/registrations", json=_payload(course, commission))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "Course is not open for enrollment"

    def test_commission_of_other_course(
        self,
        client: TestClient,
        course: Course,
        make_course: Callable[..., Course],
        make_commission: Callable[..., Commission],
    ) -> None:
        """Mismatched course and commission return 422."""
        other = make_course("Backend")
        commission = make_commission(course_id=other.id)

        response = client.post("/api/v1/registrations", json=_payload(course, commission))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_commission(
        self,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
    ) -> None:
        """Unknown commission returns 404."""
        payload = _payload(course, make_commission(), commission_id="nonexistent-id")

        response = client.post("/api/v1/registrations", json=payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "invalid"},
            {"external_handle": "kimlee"},
            {"data_consent": False},
            {"full_name": ""},
        ],
    )
    def test_invalid_personal_info(
        self,
        store: EntityStore,
        client: TestClient,
        course: Course,
        make_commission: Callable[..., Commission],
        overrides: dict[str, Any],
    ) -> None:
        """Invalid details return 422 and take no seat."""
        commission = make_commission()

        response = client.post(
            "/api/v1/registrations", json=_payload(course, commission, **overrides)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert store.get_commission(commission.id).current_enrollment == 0
