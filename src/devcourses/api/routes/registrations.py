"""Registration endpoint."""

from fastapi import APIRouter, status

from devcourses.api.dependencies import WorkflowDep
from devcourses.api.models import (
    APIResponse,
    RegistrationCreate,
    RegistrationResponse,
    registration_to_response,
)

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post(
    "",
    response_model=APIResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_registration(
    registration: RegistrationCreate, workflow: WorkflowDep
) -> APIResponse[RegistrationResponse]:
    """Register in a commission, reserving one seat."""
    created = workflow.register(
        course_id=registration.course_id,
        commission_id=registration.commission_id,
        info=registration.personal_info(),
    )
    return APIResponse(data=registration_to_response(created))
