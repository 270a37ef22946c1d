"""SqlEntityStore - relational Entity Store backed by SQLAlchemy."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from devcourses.entity_store.base import (
    COMMISSION_UPDATABLE_FIELDS,
    COURSE_UPDATABLE_FIELDS,
    check_update_fields,
)
from devcourses.entity_store.database import Database
from devcourses.entity_store.exceptions import (
    CommissionCodeExistsError,
    CommissionNotFoundError,
    CourseNotFoundError,
    EnrollmentGuardError,
    RegistrationNotFoundError,
    StoreUnavailableError,
)
from devcourses.entity_store.models import (
    DEFAULT_CAPACITY,
    Commission,
    Course,
    CourseLevel,
    Registration,
    RegistrationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class SqlEntityStore:
    """Entity Store on relational tables.

    Every call runs in its own short session. Enrollment changes are a single
    conditional UPDATE whose affected-row count tells whether it applied.
    """

    def __init__(self, db_path: str = "devcourses.db") -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        try:
            self._db.create_tables()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Cannot initialize database '{db_path}'") from e

    @property
    def database(self) -> Database:
        """The underlying Database manager."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._db.get_session()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Storage failure: %s", e)
            raise StoreUnavailableError("Storage backend unavailable") from e
        finally:
            session.close()

    # --- Course Operations ---

    def list_courses(self, active_only: bool = False) -> list[Course]:
        """List courses.

        Args:
            active_only: Only return courses with is_active set

        Returns:
            List of courses, ordered by creation
        """
        with self._session() as session:
            stmt = select(Course)
            if active_only:
                stmt = stmt.where(Course.is_active.is_(True))
            stmt = stmt.order_by(Course.created_at, Course.name)
            return list(session.execute(stmt).scalars().all())

    def get_course(self, course_id: str) -> Course | None:
        with self._session() as session:
            return session.get(Course, course_id)

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
        """Create a new course.

        Returns:
            Created Course object with generated ID
        """
        with self._session() as session:
            course = Course(
                name=name,
                description=description,
                level=level,
                duration=duration,
                total_weeks=total_weeks,
                start_date=start_date,
                is_active=is_active,
            )
            session.add(course)
            session.commit()
            session.refresh(course)
            return course

    def update_course(self, course_id: str, **fields: Any) -> Course:
        """Update course fields. Only provided fields are updated.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ValueError: If a field is not updatable
        """
        check_update_fields(fields, COURSE_UPDATABLE_FIELDS, "course")
        if "level" in fields:
            fields["level"] = CourseLevel(fields["level"]).value

        with self._session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            for key, value in fields.items():
                setattr(course, key, value)

            session.commit()
            session.refresh(course)
            return course

    # --- Commission Operations ---

    def get_commission(self, commission_id: str) -> Commission | None:
        with self._session() as session:
            return session.get(Commission, commission_id)

    def get_commissions_by_course(self, course_id: str) -> list[Commission]:
        with self._session() as session:
            stmt = (
                select(Commission)
                .where(Commission.course_id == course_id)
                .order_by(Commission.created_at, Commission.code)
            )
            return list(session.execute(stmt).scalars().all())

    def list_commissions(self, active_only: bool = False) -> list[Commission]:
        with self._session() as session:
            stmt = select(Commission)
            if active_only:
                stmt = stmt.where(Commission.is_active.is_(True))
            stmt = stmt.order_by(Commission.created_at, Commission.code)
            return list(session.execute(stmt).scalars().all())

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
        """Create a new commission with zero enrollment.

        Raises:
            CourseNotFoundError: If course doesn't exist
            CommissionCodeExistsError: If a commission with this code exists
        """
        with self._session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            commission = Commission(
                course_id=course_id,
                code=code,
                days=days,
                time=time,
                instructor=instructor,
                start_date=start_date,
                max_capacity=max_capacity,
            )
            session.add(commission)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if "UNIQUE constraint failed" in str(e) or "commissions.code" in str(e):
                    raise CommissionCodeExistsError(
                        f"Commission with code '{code}' already exists"
                    ) from e
                raise
            session.refresh(commission)
            return commission

    def update_commission(
        self, commission_id: str, *, require_empty: bool = False, **fields: Any
    ) -> Commission:
        """Update commission fields. Only provided fields are updated.

        The enrollment guards are part of the UPDATE itself: a new max_capacity
        must hold current_enrollment, and require_empty needs it to be zero.

        Raises:
            CommissionNotFoundError: If commission doesn't exist
            CommissionCodeExistsError: If the new code is taken
            EnrollmentGuardError: If the enrollment guard refused the write
            ValueError: If a field is not updatable
        """
        check_update_fields(fields, COMMISSION_UPDATABLE_FIELDS, "commission")

        conditions = [Commission.id == commission_id]
        if require_empty:
            conditions.append(Commission.current_enrollment == 0)
        if "max_capacity" in fields:
            conditions.append(Commission.current_enrollment <= fields["max_capacity"])

        applied = True
        with self._session() as session:
            if fields:
                stmt = (
                    update(Commission)
                    .where(*conditions)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
                try:
                    result = session.execute(stmt)
                    session.commit()
                except IntegrityError as e:
                    session.rollback()
                    raise CommissionCodeExistsError(
                        f"Commission with code '{fields.get('code')}' already exists"
                    ) from e
                applied = result.rowcount == 1

            commission = session.get(Commission, commission_id, populate_existing=True)
            if commission is None:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
            if not applied:
                raise EnrollmentGuardError(
                    f"Commission '{commission.code}' has {commission.current_enrollment} "
                    "enrollments"
                )
            return commission

    def delete_commission(self, commission_id: str) -> None:
        """Delete a commission that has no enrollments.

        Raises:
            CommissionNotFoundError: If commission doesn't exist
            EnrollmentGuardError: If a seat is taken
        """
        stmt = delete(Commission).where(
            Commission.id == commission_id, Commission.current_enrollment == 0
        )
        with self._session() as session:
            result = session.execute(stmt)
            session.commit()
            if result.rowcount == 1:
                return

            commission = session.get(Commission, commission_id)
            if commission is None:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
            raise EnrollmentGuardError(
                f"Commission '{commission.code}' has {commission.current_enrollment} enrollments"
            )

    def conditionally_increment_enrollment(
        self, commission_id: str, delta: int, capacity_ceiling: int
    ) -> bool:
        """Apply delta to current_enrollment in one conditional UPDATE.

        Returns:
            True if exactly one row was updated
        """
        if delta == 0:
            raise ValueError("delta must be non-zero")

        new_value = Commission.current_enrollment + delta
        conditions = [Commission.id == commission_id]
        if delta > 0:
            conditions += [
                Commission.is_active.is_(True),
                new_value <= capacity_ceiling,
                new_value <= Commission.max_capacity,
            ]
        else:
            conditions.append(new_value >= 0)

        stmt = (
            update(Commission)
            .where(*conditions)
            .values(current_enrollment=new_value)
            .execution_options(synchronize_session=False)
        )
        with self._session() as session:
            result = session.execute(stmt)
            session.commit()
            return result.rowcount == 1

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
        """Create a new pending registration.

        Raises:
            CommissionNotFoundError: If commission doesn't exist
        """
        with self._session() as session:
            if session.get(Commission, commission_id) is None:
                raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")

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
            )
            session.add(registration)
            session.commit()
            session.refresh(registration)
            return registration

    def get_registration(self, registration_id: str) -> Registration | None:
        with self._session() as session:
            return session.get(Registration, registration_id)

    def list_registrations(
        self,
        course_id: str | None = None,
        commission_id: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[Registration]:
        """List registrations with optional filters.

        Returns:
            List of registrations, ordered by created_at descending (most recent first)
        """
        with self._session() as session:
            stmt = select(Registration)

            if course_id is not None:
                stmt = stmt.where(Registration.course_id == course_id)
            if commission_id is not None:
                stmt = stmt.where(Registration.commission_id == commission_id)
            if status is not None:
                stmt = stmt.where(Registration.status == status.value)

            stmt = stmt.order_by(Registration.created_at.desc())
            return list(session.execute(stmt).scalars().all())

    def update_registration_status(
        self, registration_id: str, status: RegistrationStatus
    ) -> Registration:
        """Set a registration's status.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        with self._session() as session:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )

            registration.status = RegistrationStatus(status).value
            session.commit()
            session.refresh(registration)
            return registration
