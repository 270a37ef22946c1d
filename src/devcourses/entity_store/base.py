"""EntityStore interface shared by every storage backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from devcourses.entity_store.models import (
        Commission,
        Course,
        Registration,
        RegistrationStatus,
    )

# Fields each update_* call may write. current_enrollment is written only by
# conditionally_increment_enrollment.
COURSE_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "level", "duration", "total_weeks", "start_date", "is_active"}
)
COMMISSION_UPDATABLE_FIELDS = frozenset(
    {"code", "days", "time", "instructor", "max_capacity", "start_date", "is_active", "cancel_reason"}
)


def check_update_fields(fields: dict[str, Any], allowed: frozenset[str], entity: str) -> None:
    """Reject update fields that are unknown or not writable.

    Raises:
        ValueError: If any key is outside the allowed set.
    """
    rejected = sorted(set(fields) - allowed)
    if rejected:
        raise ValueError(f"Cannot update {entity} field(s): {', '.join(rejected)}")


class EntityStore(Protocol):
    """Storage contract for courses, commissions and registrations.

    Backends: MemoryEntityStore (dicts + locks) and SqlEntityStore (SQLAlchemy).
    Every backend raises StoreUnavailableError on infrastructure failure.
    """

    # --- Course Operations ---

    def list_courses(self, active_only: bool = False) -> list[Course]:
        """List courses in storage order."""
        ...

    def get_course(self, course_id: str) -> Course | None:
        """Get a course by ID, or None."""
        ...

    def create_course(
        self,
        name: str,
        description: str,
        level: str,
        duration: str,
        total_weeks: int,
        start_date: str,
        is_active: bool = True,
    ) -> Course:
        """Create a new course."""
        ...

    def update_course(self, course_id: str, **fields: Any) -> Course:
        """Update course fields. Raises CourseNotFoundError."""
        ...

    # --- Commission Operations ---

    def get_commission(self, commission_id: str) -> Commission | None:
        """Get a commission by ID, or None."""
        ...

    def get_commissions_by_course(self, course_id: str) -> list[Commission]:
        """List all commissions of a course in storage order."""
        ...

    def list_commissions(self, active_only: bool = False) -> list[Commission]:
        """List all commissions in storage order."""
        ...

    def create_commission(
        self,
        course_id: str,
        code: str,
        days: str,
        time: str,
        instructor: str,
        start_date: str,
        max_capacity: int = ...,
    ) -> Commission:
        """Create a commission with zero enrollment. Raises CommissionCodeExistsError."""
        ...

    def update_commission(
        self, commission_id: str, *, require_empty: bool = False, **fields: Any
    ) -> Commission:
        """Update commission fields in one guarded write.

        A new max_capacity is written only if it still holds
        current_enrollment; require_empty writes only while enrollment is 0.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            EnrollmentGuardError: If an enrollment guard refused the write.
        """
        ...

    def delete_commission(self, commission_id: str) -> None:
        """Physically delete a commission, only while its enrollment is 0.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            EnrollmentGuardError: If a seat is taken.
        """
        ...

    def conditionally_increment_enrollment(
        self, commission_id: str, delta: int, capacity_ceiling: int
    ) -> bool:
        """Atomically add delta to current_enrollment if the result fits.

        A positive delta is applied only to an active commission whose new
        enrollment stays <= min(capacity_ceiling, max_capacity). A negative
        delta is applied only if the new enrollment stays >= 0.

        Returns:
            True if the write happened, False otherwise (including unknown IDs).

        Raises:
            ValueError: If delta is zero.
        """
        ...

    # --- Registration Operations ---

    def create_registration(
        self,
        course_id: str,
        commission_id: str,
        full_name: str,
        pronouns: str,
        email: str,
        external_handle: str,
        data_consent: bool,
        community_affiliation: str | None = None,
        newsletter: bool = False,
    ) -> Registration:
        """Create a pending registration."""
        ...

    def get_registration(self, registration_id: str) -> Registration | None:
        """Get a registration by ID, or None."""
        ...

    def list_registrations(
        self,
        course_id: str | None = None,
        commission_id: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[Registration]:
        """List registrations with optional filters."""
        ...

    def update_registration_status(
        self, registration_id: str, status: RegistrationStatus
    ) -> Registration:
        """Set a registration's status. Raises RegistrationNotFoundError."""
        ...

    def close(self) -> None:
        """Release backend resources."""
        ...
