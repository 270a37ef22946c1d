"""CapacityManager - seat accounting and schedule conflict checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from devcourses.capacity.exceptions import (
    CapacityExceededError,
    CommissionInactiveError,
    InvalidCapacityBoundsError,
)
from devcourses.capacity.models import CommissionAvailability, CourseAvailability
from devcourses.entity_store import (
    MAX_CAPACITY,
    MIN_CAPACITY,
    CommissionNotFoundError,
    CourseNotFoundError,
)

if TYPE_CHECKING:
    from devcourses.entity_store import Commission, Course, EntityStore

logger = logging.getLogger(__name__)

DEFAULT_LOW_ENROLLMENT_THRESHOLD = 5


def compute_availability(commission: Commission) -> int:
    """Free seats of a commission, never negative."""
    return max(0, commission.max_capacity - commission.current_enrollment)


def validate_capacity(max_capacity: int, current_enrollment: int = 0) -> None:
    """Check a capacity value against the allowed bounds.

    Args:
        max_capacity: Proposed capacity.
        current_enrollment: Seats already taken; capacity may not drop below it.

    Raises:
        InvalidCapacityBoundsError: If the capacity is outside MIN_CAPACITY..MAX_CAPACITY
            or below current_enrollment.
    """
    if not MIN_CAPACITY <= max_capacity <= MAX_CAPACITY:
        raise InvalidCapacityBoundsError(
            f"Capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}, got {max_capacity}"
        )
    if max_capacity < current_enrollment:
        raise InvalidCapacityBoundsError(
            f"Capacity {max_capacity} is below current enrollment {current_enrollment}"
        )


class CapacityManager:
    """Sole authority over commission enrollment counts.

    All seat changes go through reserve_seat/release_seat, which delegate to the
    store's conditional write so that concurrent reservations on one
    commission can never overbook it.
    """

    def __init__(self, store: EntityStore) -> None:
        """Initialize the CapacityManager.

        Args:
            store: Entity Store backend for reads and conditional writes.
        """
        self.store = store

    def _get_commission(self, commission_id: str) -> Commission:
        commission = self.store.get_commission(commission_id)
        if commission is None:
            raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
        return commission

    def reserve_seat(self, commission_id: str) -> Commission:
        """Take one seat in a commission.

        Args:
            commission_id: The commission's unique ID.

        Returns:
            The commission snapshot after the increment.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            CommissionInactiveError: If the commission is not active.
            CapacityExceededError: If no seat is left. Nothing is written.
        """
        commission = self._get_commission(commission_id)
        if not commission.is_active:
            raise CommissionInactiveError(f"Commission '{commission.code}' is not active")

        if not self.store.conditionally_increment_enrollment(
            commission_id, 1, commission.max_capacity
        ):
            # Lost a race, or the commission changed since it was read
            current = self._get_commission(commission_id)
            if not current.is_active:
                raise CommissionInactiveError(f"Commission '{current.code}' is not active")
            logger.info(
                "Reservation refused for %s: %d/%d seats taken",
                current.code,
                current.current_enrollment,
                current.max_capacity,
            )
            raise CapacityExceededError(f"No seats available in commission '{current.code}'")

        updated = self._get_commission(commission_id)
        logger.info(
            "Seat reserved in %s (%d/%d)",
            updated.code,
            updated.current_enrollment,
            updated.max_capacity,
        )
        return updated

    def release_seat(self, commission_id: str) -> Commission:
        """Give back one seat, never going below zero.

        Only used to compensate a reservation whose registration could not be
        stored.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
        """
        commission = self._get_commission(commission_id)
        if not self.store.conditionally_increment_enrollment(
            commission_id, -1, commission.max_capacity
        ):
            logger.warning("Release ignored for %s: enrollment already at 0", commission.code)
            return self._get_commission(commission_id)

        updated = self._get_commission(commission_id)
        logger.info(
            "Seat released in %s (%d/%d)",
            updated.code,
            updated.current_enrollment,
            updated.max_capacity,
        )
        return updated

    def check_schedule_conflict(
        self,
        course_id: str,
        days: str,
        time: str,
        exclude_commission_id: str | None = None,
    ) -> bool:
        """Whether another active commission of the course has the same slot.

        Labels are compared as exact strings.

        Args:
            course_id: Course whose commissions are checked.
            days: Days label of the proposed slot.
            time: Time label of the proposed slot.
            exclude_commission_id: Commission to ignore (the one being edited).
        """
        return any(
            c.is_active
            and c.id != exclude_commission_id
            and c.days == days
            and c.time == time
            for c in self.store.get_commissions_by_course(course_id)
        )

    def compute_availability(self, commission: Commission) -> int:
        """Free seats of a commission, never negative. No side effects."""
        return compute_availability(commission)

    def list_with_availability(self, course_id: str) -> list[CommissionAvailability]:
        """All commissions of a course with their free seats, in storage order."""
        return [
            CommissionAvailability(commission=c, available_spots=compute_availability(c))
            for c in self.store.get_commissions_by_course(course_id)
        ]

    def get_course_availability(self, course_id: str) -> CourseAvailability:
        """One course with its commissions and available commission count.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
        """
        course = self.store.get_course(course_id)
        if course is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        return self._course_availability(course)

    def list_courses_with_availability(self, active_only: bool = True) -> list[CourseAvailability]:
        """Every course with its commissions and available commission count."""
        return [
            self._course_availability(course)
            for course in self.store.list_courses(active_only=active_only)
        ]

    def _course_availability(self, course: Course) -> CourseAvailability:
        commissions = self.list_with_availability(course.id)
        available = sum(
            1 for item in commissions if item.commission.is_active and item.available_spots > 0
        )
        return CourseAvailability(
            course=course,
            commissions=commissions,
            available_commissions=available,
        )

    def low_enrollment_commissions(
        self, threshold: int = DEFAULT_LOW_ENROLLMENT_THRESHOLD
    ) -> list[Commission]:
        """Active commissions whose enrollment is below the threshold."""
        return [
            c
            for c in self.store.list_commissions(active_only=True)
            if c.current_enrollment < threshold
        ]
