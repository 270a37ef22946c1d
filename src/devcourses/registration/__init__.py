"""Registration Workflow - multi-step enrollment flow."""

from devcourses.registration.exceptions import (
    CommissionMismatchError,
    CourseUnavailableError,
    InvalidTransitionError,
    RegistrationError,
)
from devcourses.registration.models import PersonalInfo, RegistrationDraft, RegistrationStep
from devcourses.registration.workflow import RegistrationWorkflow

__all__ = [
    "CommissionMismatchError",
    "CourseUnavailableError",
    "InvalidTransitionError",
    "PersonalInfo",
    "RegistrationDraft",
    "RegistrationError",
    "RegistrationStep",
    "RegistrationWorkflow",
]
