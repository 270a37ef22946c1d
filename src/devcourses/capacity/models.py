"""Derived availability views for the Capacity & Scheduling Manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devcourses.entity_store import Commission, Course


@dataclass
class CommissionAvailability:
    """A commission snapshot with its computed free seats.

    Attributes:
        commission: The commission as read from the store.
        available_spots: max(0, max_capacity - current_enrollment).
    """

    commission: Commission
    available_spots: int

    @property
    def is_full(self) -> bool:
        return self.available_spots == 0


@dataclass
class CourseAvailability:
    """A course with its commissions and how many can still take students.

    Attributes:
        course: The course as read from the store.
        commissions: Every commission of the course with availability.
        available_commissions: Active commissions with at least one free seat.
    """

    course: Course
    commissions: list[CommissionAvailability] = field(default_factory=list)
    available_commissions: int = 0
