"""REST API for DevCourses."""

from devcourses.api.app import app, create_app, register_exception_handlers
from devcourses.api.models import (
    APIResponse,
    CommissionResponse,
    CourseResponse,
    RegistrationCreate,
    RegistrationResponse,
)

__all__ = [
    "APIResponse",
    "CommissionResponse",
    "CourseResponse",
    "RegistrationCreate",
    "RegistrationResponse",
    "app",
    "create_app",
    "register_exception_handlers",
]
