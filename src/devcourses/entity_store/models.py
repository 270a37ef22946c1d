"""SQLAlchemy models for the Entity Store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)

MIN_CAPACITY = 5
MAX_CAPACITY = 30
DEFAULT_CAPACITY = 20


class CourseLevel(StrEnum):
    """Course difficulty level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class RegistrationStatus(StrEnum):
    """Registration status enum."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CommunityAffiliation(StrEnum):
    """Optional self-reported community affiliation."""

    YES = "yes"
    NO = "no"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds, set when a row is created."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course model - a program users can enroll in."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    duration: Mapped[str] = mapped_column(String(100), nullable=False)
    total_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __init__(
        self,
        name: str,
        description: str,
        level: str,
        duration: str,
        total_weeks: int,
        start_date: str,
        id: str | None = None,
        is_active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.description = description
        self.level = CourseLevel(level).value
        self.duration = duration
        self.total_weeks = total_weeks
        self.start_date = start_date
        self.is_active = is_active

    @property
    def course_level(self) -> CourseLevel:
        """Get level as CourseLevel enum."""
        return CourseLevel(self.level)

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, name={self.name!r}, active={self.is_active!r})>"


class Commission(Base):
    """Commission model - a scheduled offering of a course."""

    __tablename__ = "commissions"
    __table_args__ = (
        CheckConstraint("current_enrollment >= 0", name="ck_commissions_enrollment_floor"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    days: Mapped[str] = mapped_column(String(100), nullable=False)
    time: Mapped[str] = mapped_column(String(100), nullable=False)
    instructor: Mapped[str] = mapped_column(String(255), nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_enrollment: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    cancel_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __init__(
        self,
        course_id: str,
        code: str,
        days: str,
        time: str,
        instructor: str,
        start_date: str,
        id: str | None = None,
        max_capacity: int = DEFAULT_CAPACITY,
        current_enrollment: int = 0,
        is_active: bool = True,
        cancel_reason: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.code = code
        self.days = days
        self.time = time
        self.instructor = instructor
        self.start_date = start_date
        self.max_capacity = max_capacity
        self.current_enrollment = current_enrollment
        self.is_active = is_active
        self.cancel_reason = cancel_reason

    def __repr__(self) -> str:
        return (
            f"<Commission(id={self.id!r}, code={self.code!r}, "
            f"enrollment={self.current_enrollment!r}/{self.max_capacity!r})>"
        )


class Registration(Base):
    """Registration model - one successful enrollment in a commission."""

    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    commission_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("commissions.id"), nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    pronouns: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    external_handle: Mapped[str] = mapped_column(String(100), nullable=False)
    community_affiliation: Mapped[str | None] = mapped_column(String(20), nullable=True)
    data_consent: Mapped[bool] = mapped_column(Boolean, nullable=False)
    newsletter: Mapped[bool] = mapped_column(Boolean, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __init__(
        self,
        course_id: str,
        commission_id: str,
        full_name: str,
        pronouns: str,
        email: str,
        external_handle: str,
        data_consent: bool,
        id: str | None = None,
        community_affiliation: str | None = None,
        newsletter: bool = False,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.commission_id = commission_id
        self.full_name = full_name
        self.pronouns = pronouns
        self.email = email
        self.external_handle = external_handle
        self.community_affiliation = community_affiliation
        self.data_consent = data_consent
        self.newsletter = newsletter
        self.status = status if status is not None else RegistrationStatus.PENDING.value

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, commission_id={self.commission_id!r}, "
            f"status={self.status!r})>"
        )
