"""Capacity & Scheduling Manager - seat accounting and schedule conflicts."""

from devcourses.capacity.exceptions import (
    CapacityError,
    CapacityExceededError,
    CommissionInactiveError,
    HasActiveEnrollmentsError,
    InvalidCapacityBoundsError,
    InvalidCommissionError,
    ScheduleConflictError,
)
from devcourses.capacity.manager import (
    DEFAULT_LOW_ENROLLMENT_THRESHOLD,
    CapacityManager,
    compute_availability,
    validate_capacity,
)
from devcourses.capacity.models import CommissionAvailability, CourseAvailability

__all__ = [
    "DEFAULT_LOW_ENROLLMENT_THRESHOLD",
    "CapacityError",
    "CapacityExceededError",
    "CapacityManager",
    "CommissionAvailability",
    "CommissionInactiveError",
    "CourseAvailability",
    "HasActiveEnrollmentsError",
    "InvalidCapacityBoundsError",
    "InvalidCommissionError",
    "ScheduleConflictError",
    "compute_availability",
    "validate_capacity",
]
