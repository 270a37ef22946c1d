"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from devcourses.capacity import CommissionAvailability, CourseAvailability, compute_availability
from devcourses.entity_store import DEFAULT_CAPACITY, CourseLevel, RegistrationStatus
from devcourses.registration import PersonalInfo

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str
    timestamp: datetime


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    level: CourseLevel
    duration: str = Field(..., min_length=1, max_length=100)
    total_weeks: int = Field(..., ge=1, le=104)
    start_date: str = Field(..., min_length=1, max_length=100)


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    level: CourseLevel | None = None
    duration: str | None = Field(default=None, min_length=1, max_length=100)
    total_weeks: int | None = Field(default=None, ge=1, le=104)
    start_date: str | None = Field(default=None, min_length=1, max_length=100)


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    level: str
    duration: str
    total_weeks: int
    start_date: str
    is_active: bool
    created_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


# Commission models


class CommissionCreate(BaseModel):
    """Request model for creating a commission.

    Capacity bounds are enforced by AdminOperations.
    """

    course_id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=50)
    days: str = Field(..., min_length=1, max_length=100)
    time: str = Field(..., min_length=1, max_length=100)
    instructor: str = Field(..., min_length=1, max_length=255)
    start_date: str = Field(..., min_length=1, max_length=100)
    max_capacity: int = DEFAULT_CAPACITY


class CommissionUpdate(BaseModel):
    """Request model for updating a commission (partial update)."""

    code: str | None = Field(default=None, min_length=1, max_length=50)
    days: str | None = Field(default=None, min_length=1, max_length=100)
    time: str | None = Field(default=None, min_length=1, max_length=100)
    instructor: str | None = Field(default=None, min_length=1, max_length=255)
    start_date: str | None = Field(default=None, min_length=1, max_length=100)
    max_capacity: int | None = None


class CommissionCancel(BaseModel):
    """Request model for cancelling a commission."""

    reason: str = Field(..., min_length=1, max_length=1000)


class CommissionResponse(BaseModel):
    """Response model for a commission, with its free seats."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    code: str
    days: str
    time: str
    instructor: str
    max_capacity: int
    current_enrollment: int
    available_spots: int = 0
    start_date: str
    is_active: bool
    cancel_reason: str | None
    created_at: datetime


def commission_to_response(commission: Any) -> CommissionResponse:
    """Convert a Commission model to CommissionResponse."""
    response = CommissionResponse.model_validate(commission)
    response.available_spots = compute_availability(commission)
    return response


def availability_to_response(item: CommissionAvailability) -> CommissionResponse:
    """Convert a CommissionAvailability view to CommissionResponse."""
    response = CommissionResponse.model_validate(item.commission)
    response.available_spots = item.available_spots
    return response


class CourseWithCommissionsResponse(CourseResponse):
    """Response model for a course with its commissions."""

    commissions: list[CommissionResponse] = []
    available_commissions: int = 0


def course_availability_to_response(view: CourseAvailability) -> CourseWithCommissionsResponse:
    """Convert a CourseAvailability view to CourseWithCommissionsResponse."""
    response = CourseWithCommissionsResponse.model_validate(view.course)
    response.commissions = [availability_to_response(item) for item in view.commissions]
    response.available_commissions = view.available_commissions
    return response


# Registration models


class RegistrationCreate(PersonalInfo):
    """Request model for registering in a commission."""

    course_id: str = Field(..., min_length=1)
    commission_id: str = Field(..., min_length=1)

    def personal_info(self) -> PersonalInfo:
        """The personal details part of the request."""
        return PersonalInfo.model_validate(
            self.model_dump(exclude={"course_id", "commission_id"})
        )


class RegistrationStatusUpdate(BaseModel):
    """Request model for changing a registration's status."""

    status: RegistrationStatus


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    commission_id: str
    full_name: str
    pronouns: str
    email: str
    external_handle: str
    community_affiliation: str | None
    data_consent: bool
    newsletter: bool
    status: str
    created_at: datetime


def registration_to_response(registration: Any) -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    return RegistrationResponse.model_validate(registration)
