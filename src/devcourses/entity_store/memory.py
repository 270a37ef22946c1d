"""MemoryEntityStore - in-process Entity Store backed by dicts."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, TypeVar

from sqlalchemy import inspect

from devcourses.entity_store.base import (
    COMMISSION_UPDATABLE_FIELDS,
    COURSE_UPDATABLE_FIELDS,
    check_update_fields,
)
from devcourses.entity_store.exceptions import (
    CommissionCodeExistsError,
    CommissionNotFoundError,
    CourseNotFoundError,
    EnrollmentGuardError,
    RegistrationNotFoundError,
)
from devcourses.entity_store.models import (
    DEFAULT_CAPACITY,
    Base,
    Commission,
    Course,
    CourseLevel,
    Registration,
    RegistrationStatus,
    utcnow,
)

T = TypeVar("T", bound=Base)


def _check_enrollment_guard(
    commission: Commission, max_capacity: int | None, require_empty: bool
) -> None:
    if require_empty and commission.current_enrollment > 0:
        raise EnrollmentGuardError(
            f"Commission '{commission.code}' has {commission.current_enrollment} enrollments"
        )
    if max_capacity is not None and commission.current_enrollment > max_capacity:
        raise EnrollmentGuardError(
            f"Commission '{commission.code}' has {commission.current_enrollment} enrollments, "
            f"more than {max_capacity}"
        )


def _copy(record: T) -> T:
    """Return a detached copy of a record so callers never share stored state."""
    values = {attr.key: getattr(record, attr.key) for attr in inspect(type(record)).column_attrs}
    return type(record)(**values)


class MemoryEntityStore:
    """Entity Store on plain dicts, for development and tests.

    Reads return copies; only this class mutates the stored records. The maps
    are guarded by one lock and each commission's enrollment by its own lock.
    """

    def __init__(self) -> None:
        self._courses: dict[str, Course] = {}
        self._commissions: dict[str, Commission] = {}
        self._registrations: dict[str, Registration] = {}
        self._lock = threading.RLock()
        self._enrollment_locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)

    def close(self) -> None:
        """Nothing to release."""

    # --- Course Operations ---

    def list_courses(self, active_only: bool = False) -> list[Course]:
        with self._lock:
            return [
                _copy(course)
                for course in self._courses.values()
                if course.is_active or not active_only
            ]

    def get_course(self, course_id: str) -> Course | None:
        with self._lock:
            course = self._courses.get(course_id)
            return _copy(course) if course is not None else None

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
        course = Course(
            name=name,
            description=description,
            level=level,
            duration=duration,
            total_weeks=total_weeks,
            start_date=start_date,
            is_active=is_active,
            created_at=utcnow(),
        )
        with self._lock:
            self._courses[course.id] = course
            return _copy(course)

    def update_course(self, course_id: str, **fields: Any) -> Course:
        check_update_fields(fields, COURSE_UPDATABLE_FIELDS, "course")
        if "level" in fields:
            fields["level"] = CourseLevel(fields["level"]).value

        with self._lock:
            course = self._courses.get(course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            for key, value in fields.items():
                setattr(course, key, value)
            return _copy(course)

    # --- Commission Operations ---

    def get_commission(self, commission_id: str) -> Commission | None:
        with self._lock:
            commission = self._commissions.get(commission_id)
            return _copy(commission) if commission is not None else None

    def get_commissions_by_course(self, course_id: str) -> list[Commission]:
        with self._lock:
            return [_copy(c) for c in self._commissions.values() if c.course_id == course_id]

    def list_commissions(self, active_only: bool = False) -> list[Commission]:
        with self._lock:
            return [_copy(c) for c in self._commissions.values() if c.is_active or not active_only]

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
        with self._lock:
            if course_id not in self._courses:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            self._check_code_free(code)

            commission = Commission(
                course_id=course_id,
                code=code,
                days=days,
                time=time,
                instructor=instructor,
                start_date=start_date,
                max_capacity=max_capacity,
                created_at=utcnow(),
            )
            self._commissions[commission.id] = commission
            return _copy(commission)

    def update_commission(
        self, commission_id: str, *, require_empty: bool = False, **fields: Any
    ) -> Commission:
        check_update_fields(fields, COMMISSION_UPDATABLE_FIELDS, "commission")

        with self._lock:
            commission = self._commissions.get(commission_id)
            if commission is None:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
            if "code" in fields and fields["code"] != commission.code:
                self._check_code_free(fields["code"])

            with self._enrollment_locks[commission_id]:
                _check_enrollment_guard(commission, fields.get("max_capacity"), require_empty)
                for key, value in fields.items():
                    setattr(commission, key, value)
            return _copy(commission)

    def delete_commission(self, commission_id: str) -> None:
        with self._lock:
            commission = self._commissions.get(commission_id)
            if commission is None:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
            with self._enrollment_locks[commission_id]:
                _check_enrollment_guard(commission, None, require_empty=True)
                del self._commissions[commission_id]
            self._enrollment_locks.pop(commission_id, None)

    def conditionally_increment_enrollment(
        self, commission_id: str, delta: int, capacity_ceiling: int
    ) -> bool:
        if delta == 0:
            raise ValueError("delta must be non-zero")

        with self._lock:
            commission = self._commissions.get(commission_id)
            if commission is None:
                return False
            enrollment_lock = self._enrollment_locks[commission_id]

        # Check-and-write is one unit per commission; other commissions proceed in parallel
        with enrollment_lock:
            if self._commissions.get(commission_id) is not commission:
                # Deleted while waiting for the lock
                return False
            new_value = commission.current_enrollment + delta
            if delta > 0:
                ceiling = min(capacity_ceiling, commission.max_capacity)
                if not commission.is_active or new_value > ceiling:
                    return False
            elif new_value < 0:
                return False
            commission.current_enrollment = new_value
            return True

    def _check_code_free(self, code: str) -> None:
        if any(c.code == code for c in self._commissions.values()):
            raise CommissionCodeExistsError(f"Commission with code '{code}' already exists")

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
        registration = Registration(
            course_id=course_id,
            commission_id=commission_id,
            full_name=full_name,
            pronouns=pronouns,
            email=email,
            external_handle=external_handle,
            data_consent=data_consent,
            community_affiliation=community_affiliation,
            newsletter=newsletter,
            created_at=utcnow(),
        )
        with self._lock:
            if commission_id not in self._commissions:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
            self._registrations[registration.id] = registration
            return _copy(registration)

    def get_registration(self, registration_id: str) -> Registration | None:
        with self._lock:
            registration = self._registrations.get(registration_id)
            return _copy(registration) if registration is not None else None

    def list_registrations(
        self,
        course_id: str | None = None,
        commission_id: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[Registration]:
        with self._lock:
            registrations = [
                _copy(r)
                for r in self._registrations.values()
                if (course_id is None or r.course_id == course_id)
                and (commission_id is None or r.commission_id == commission_id)
                and (status is None or r.status == status.value)
            ]
        registrations.reverse()
        return registrations

    def update_registration_status(
        self, registration_id: str, status: RegistrationStatus
    ) -> Registration:
        with self._lock:
            registration = self._registrations.get(registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            registration.status = RegistrationStatus(status).value
            return _copy(registration)
