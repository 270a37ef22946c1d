"""AdminOperations - course and commission lifecycle for administrators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from devcourses.capacity import (
    DEFAULT_LOW_ENROLLMENT_THRESHOLD,
    HasActiveEnrollmentsError,
    InvalidCapacityBoundsError,
    InvalidCommissionError,
    ScheduleConflictError,
    validate_capacity,
)
from devcourses.entity_store import (
    DEFAULT_CAPACITY,
    CommissionNotFoundError,
    CourseLevel,
    CourseNotFoundError,
    EnrollmentGuardError,
    RegistrationNotFoundError,
    RegistrationStatus,
)

if TYPE_CHECKING:
    from devcourses.capacity import CapacityManager
    from devcourses.entity_store import Commission, Course, EntityStore, Registration

logger = logging.getLogger(__name__)

COURSE_DEACTIVATED_REASON = "Course deactivated"


def _require_text(**values: str | None) -> None:
    missing = [name for name, value in values.items() if value is None or not value.strip()]
    if missing:
        raise InvalidCommissionError(f"Required field(s) missing: {', '.join(missing)}")


class AdminOperations:
    """Administrator actions on courses, commissions and registrations.

    Every business rule is checked before anything is written.
    """

    def __init__(
        self,
        store: EntityStore,
        capacity: CapacityManager,
        low_enrollment_threshold: int = DEFAULT_LOW_ENROLLMENT_THRESHOLD,
    ) -> None:
        """Initialize AdminOperations.

        Args:
            store: Entity Store backend.
            capacity: CapacityManager for conflict checks and capacity queries.
            low_enrollment_threshold: Default threshold for low_enrollment_report.
        """
        self.store = store
        self.capacity = capacity
        self.low_enrollment_threshold = low_enrollment_threshold

    # --- Course Operations ---

    def create_course(
        self,
        name: str,
        description: str,
        level: CourseLevel | str,
        duration: str,
        total_weeks: int,
        start_date: str,
    ) -> Course:
        """Create a new active course.

        Raises:
            ValueError: If level is unknown or total_weeks is not positive.
        """
        if total_weeks <= 0:
            raise ValueError("total_weeks must be positive")
        course = self.store.create_course(
            name=name,
            description=description,
            level=CourseLevel(level).value,
            duration=duration,
            total_weeks=total_weeks,
            start_date=start_date,
        )
        logger.info("Course created: %s (%s)", course.name, course.id)
        return course

    def update_course(self, course_id: str, **fields: Any) -> Course:
        """Update course details. Use deactivate_course to deactivate.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
            ValueError: If a field cannot be updated here.
        """
        if "is_active" in fields:
            raise ValueError("Use deactivate_course to change a course's active flag")
        return self.store.update_course(course_id, **fields)

    def deactivate_course(self, course_id: str) -> Course:
        """Deactivate a course and its active commissions.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
            HasActiveEnrollmentsError: If an active commission has enrollments.
        """
        if self.store.get_course(course_id) is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")

        active = [c for c in self.store.get_commissions_by_course(course_id) if c.is_active]
        enrolled = [c.code for c in active if c.current_enrollment > 0]
        if enrolled:
            raise HasActiveEnrollmentsError(
                f"Course '{course_id}' has enrolled commissions: {', '.join(enrolled)}"
            )

        closed: list[Commission] = []
        try:
            for commission in active:
                self.store.update_commission(
                    commission.id,
                    require_empty=True,
                    is_active=False,
                    cancel_reason=COURSE_DEACTIVATED_REASON,
                )
                closed.append(commission)
        except EnrollmentGuardError as e:
            # A seat was taken after the check; reopen what was already closed
            for commission in closed:
                self.store.update_commission(commission.id, is_active=True, cancel_reason=None)
            raise HasActiveEnrollmentsError(str(e)) from e
        course = self.store.update_course(course_id, is_active=False)
        logger.info("Course deactivated: %s (%d commissions closed)", course.name, len(active))
        return course

    # --- Commission Operations ---

    def create_commission(
        self,
        course_id: str,
        code: str,
        days: str,
        time: str,
        instructor: str,
        start_date: str,
        max_capacity: int = DEFAULT_CAPACITY,
    ) -> Commission:
        """Create a commission after validating it.

        Raises:
            InvalidCommissionError: If a required field is blank.
            InvalidCapacityBoundsError: If max_capacity is outside 5..30.
            CourseNotFoundError: If the course doesn't exist.
            ScheduleConflictError: If an active commission of the course has the same slot.
            CommissionCodeExistsError: If the code is taken.
        """
        _require_text(
            course_id=course_id,
            code=code,
            days=days,
            time=time,
            instructor=instructor,
            start_date=start_date,
        )
        validate_capacity(max_capacity)
        if self.store.get_course(course_id) is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        if self.capacity.check_schedule_conflict(course_id, days, time):
            raise ScheduleConflictError(
                f"Course '{course_id}' already has an active commission on {days} at {time}"
            )

        commission = self.store.create_commission(
            course_id=course_id,
            code=code,
            days=days,
            time=time,
            instructor=instructor,
            start_date=start_date,
            max_capacity=max_capacity,
        )
        logger.info("Commission created: %s (%s %s)", commission.code, days, time)
        return commission

    def update_commission(
        self,
        commission_id: str,
        code: str | None = None,
        days: str | None = None,
        time: str | None = None,
        instructor: str | None = None,
        start_date: str | None = None,
        max_capacity: int | None = None,
    ) -> Commission:
        """Update a commission. Only provided fields are updated.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            InvalidCommissionError: If a provided text field is blank.
            InvalidCapacityBoundsError: If max_capacity is outside 5..30 or
                below the current enrollment.
            ScheduleConflictError: If the new slot collides with another active commission.
            CommissionCodeExistsError: If the new code is taken.
        """
        commission = self._get_commission(commission_id)

        fields: dict[str, Any] = {
            key: value
            for key, value in {
                "code": code,
                "days": days,
                "time": time,
                "instructor": instructor,
                "start_date": start_date,
            }.items()
            if value is not None
        }
        _require_text(**fields)

        if max_capacity is not None:
            validate_capacity(max_capacity, commission.current_enrollment)
            fields["max_capacity"] = max_capacity

        new_days = fields.get("days", commission.days)
        new_time = fields.get("time", commission.time)
        if (new_days, new_time) != (commission.days, commission.time) and (
            self.capacity.check_schedule_conflict(
                commission.course_id, new_days, new_time, exclude_commission_id=commission_id
            )
        ):
            raise ScheduleConflictError(
                f"Course '{commission.course_id}' already has an active commission "
                f"on {new_days} at {new_time}"
            )

        if not fields:
            return commission
        try:
            updated = self.store.update_commission(commission_id, **fields)
        except EnrollmentGuardError as e:
            raise InvalidCapacityBoundsError(str(e)) from e
        logger.info("Commission updated: %s (%s)", updated.code, ", ".join(sorted(fields)))
        return updated

    def cancel_commission(self, commission_id: str, reason: str) -> Commission:
        """Deactivate a commission, keeping its enrollment and registrations.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            InvalidCommissionError: If the reason is blank.
        """
        _require_text(reason=reason)
        self._get_commission(commission_id)
        commission = self.store.update_commission(
            commission_id, is_active=False, cancel_reason=reason.strip()
        )
        logger.info("Commission cancelled: %s (%s)", commission.code, commission.cancel_reason)
        return commission

    def delete_commission(self, commission_id: str) -> None:
        """Delete a commission that has no enrollments.

        Raises:
            CommissionNotFoundError: If the commission doesn't exist.
            HasActiveEnrollmentsError: If current_enrollment > 0. Nothing is changed.
        """
        commission = self._get_commission(commission_id)
        try:
            self.store.delete_commission(commission_id)
        except EnrollmentGuardError as e:
            raise HasActiveEnrollmentsError(str(e)) from e
        logger.info("Commission deleted: %s", commission.code)

    def low_enrollment_report(self, threshold: int | None = None) -> list[Commission]:
        """Active commissions below the enrollment threshold.

        Args:
            threshold: Overrides the configured threshold.
        """
        if threshold is None:
            threshold = self.low_enrollment_threshold
        return self.capacity.low_enrollment_commissions(threshold)

    # --- Registration Operations ---

    def list_registrations(
        self,
        course_id: str | None = None,
        commission_id: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[Registration]:
        """List registrations with optional filters."""
        return self.store.list_registrations(
            course_id=course_id, commission_id=commission_id, status=status
        )

    def update_registration_status(
        self, registration_id: str, status: RegistrationStatus | str
    ) -> Registration:
        """Change a registration's status. Enrollment counts are not touched.

        Raises:
            RegistrationNotFoundError: If the registration doesn't exist.
            ValueError: If the status is unknown.
        """
        new_status = RegistrationStatus(status)
        if self.store.get_registration(registration_id) is None:
            raise RegistrationNotFoundError(f"Registration with id '{registration_id}' not found")
        registration = self.store.update_registration_status(registration_id, new_status)
        logger.info("Registration %s set to %s", registration_id, new_status.value)
        return registration

    def _get_commission(self, commission_id: str) -> Commission:
        commission = self.store.get_commission(commission_id)
        if commission is None:
            raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
        return commission
