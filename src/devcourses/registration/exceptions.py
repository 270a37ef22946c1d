"""Exceptions for the Registration Workflow."""


class RegistrationError(Exception):
    """Base exception for registration flow errors."""


class InvalidTransitionError(RegistrationError):
    """Requested step is not reachable from the draft's current step."""


class CourseUnavailableError(RegistrationError):
    """Course is inactive and cannot be registered for."""


class CommissionMismatchError(RegistrationError):
    """Commission does not belong to the selected course."""
