"""Public catalog endpoints: courses and commissions with availability."""

from fastapi import APIRouter

from devcourses.api.dependencies import CapacityDep
from devcourses.api.models import (
    APIResponse,
    CommissionResponse,
    CourseWithCommissionsResponse,
    availability_to_response,
    commission_to_response,
    course_availability_to_response,
)
from devcourses.entity_store import CommissionNotFoundError

router = APIRouter(tags=["courses"])


@router.get("/courses", response_model=APIResponse[list[CourseWithCommissionsResponse]])
def list_courses(capacity: CapacityDep) -> APIResponse[list[CourseWithCommissionsResponse]]:
    """List active courses with their commissions and availability."""
    courses = capacity.list_courses_with_availability(active_only=True)
    return APIResponse(data=[course_availability_to_response(c) for c in courses])


@router.get("/courses/{course_id}", response_model=APIResponse[CourseWithCommissionsResponse])
def get_course(course_id: str, capacity: CapacityDep) -> APIResponse[CourseWithCommissionsResponse]:
    """Get a course with its commissions and availability."""
    course = capacity.get_course_availability(course_id)
    return APIResponse(data=course_availability_to_response(course))


@router.get(
    "/courses/{course_id}/commissions",
    response_model=APIResponse[list[CommissionResponse]],
)
def list_course_commissions(
    course_id: str, capacity: CapacityDep
) -> APIResponse[list[CommissionResponse]]:
    """List a course's commissions with their free seats."""
    # Raises CourseNotFoundError for unknown courses
    capacity.get_course_availability(course_id)
    commissions = capacity.list_with_availability(course_id)
    return APIResponse(data=[availability_to_response(c) for c in commissions])


@router.get("/commissions/{commission_id}", response_model=APIResponse[CommissionResponse])
def get_commission(commission_id: str, capacity: CapacityDep) -> APIResponse[CommissionResponse]:
    """Get a commission with its free seats."""
    commission = capacity.store.get_commission(commission_id)
    if commission is None:
        raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
    return APIResponse(data=commission_to_response(commission))
