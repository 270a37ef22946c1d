"""Administrator endpoints. Every route requires the admin role."""

from fastapi import APIRouter, Depends, Query, status

from devcourses.api.dependencies import AdminDep, require_admin
from devcourses.api.models import (
    APIResponse,
    CommissionCancel,
    CommissionCreate,
    CommissionResponse,
    CommissionUpdate,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    RegistrationResponse,
    RegistrationStatusUpdate,
    commission_to_response,
    course_to_response,
    registration_to_response,
)
from devcourses.entity_store import RegistrationStatus

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# Courses


@router.post(
    "/courses",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, admin: AdminDep) -> APIResponse[CourseResponse]:
    """Create a course."""
    created = admin.create_course(**course.model_dump())
    return APIResponse(data=course_to_response(created))


@router.patch("/courses/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: str, course: CourseUpdate, admin: AdminDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = admin.update_course(course_id, **course.model_dump(exclude_none=True))
    return APIResponse(data=course_to_response(updated))


@router.post("/courses/{course_id}/deactivate", response_model=APIResponse[CourseResponse])
def deactivate_course(course_id: str, admin: AdminDep) -> APIResponse[CourseResponse]:
    """Deactivate a course and close its commissions."""
    course = admin.deactivate_course(course_id)
    return APIResponse(data=course_to_response(course))


# Commissions


@router.get(
    "/commissions/low-enrollment",
    response_model=APIResponse[list[CommissionResponse]],
)
def low_enrollment_commissions(
    admin: AdminDep,
    threshold: int | None = Query(default=None, ge=0),
) -> APIResponse[list[CommissionResponse]]:
    """List active commissions below the enrollment threshold."""
    commissions = admin.low_enrollment_report(threshold)
    return APIResponse(data=[commission_to_response(c) for c in commissions])


@router.post(
    "/commissions",
    response_model=APIResponse[CommissionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_commission(
    commission: CommissionCreate, admin: AdminDep
) -> APIResponse[CommissionResponse]:
    """Create a commission."""
    created = admin.create_commission(**commission.model_dump())
    return APIResponse(data=commission_to_response(created))


@router.patch("/commissions/{commission_id}", response_model=APIResponse[CommissionResponse])
def update_commission(
    commission_id: str, commission: CommissionUpdate, admin: AdminDep
) -> APIResponse[CommissionResponse]:
    """Update a commission (partial update)."""
    updated = admin.update_commission(commission_id, **commission.model_dump(exclude_none=True))
    return APIResponse(data=commission_to_response(updated))


@router.post(
    "/commissions/{commission_id}/cancel",
    response_model=APIResponse[CommissionResponse],
)
def cancel_commission(
    commission_id: str, cancel: CommissionCancel, admin: AdminDep
) -> APIResponse[CommissionResponse]:
    """Cancel a commission with a reason."""
    cancelled = admin.cancel_commission(commission_id, cancel.reason)
    return APIResponse(data=commission_to_response(cancelled))


@router.delete("/commissions/{commission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_commission(commission_id: str, admin: AdminDep) -> None:
    """Delete a commission with no enrollments."""
    admin.delete_commission(commission_id)


# Registrations


@router.get("/registrations", response_model=APIResponse[list[RegistrationResponse]])
def list_registrations(
    admin: AdminDep,
    course_id: str | None = None,
    commission_id: str | None = None,
    status: RegistrationStatus | None = None,
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations with optional filters."""
    registrations = admin.list_registrations(
        course_id=course_id, commission_id=commission_id, status=status
    )
    return APIResponse(data=[registration_to_response(r) for r in registrations])


@router.patch(
    "/registrations/{registration_id}/status",
    response_model=APIResponse[RegistrationResponse],
)
def update_registration_status(
    registration_id: str, update: RegistrationStatusUpdate, admin: AdminDep
) -> APIResponse[RegistrationResponse]:
    """Change a registration's status."""
    registration = admin.update_registration_status(registration_id, update.status)
    return APIResponse(data=registration_to_response(registration))
