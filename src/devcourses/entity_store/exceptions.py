"""Custom exceptions for the Entity Store."""


class EntityStoreError(Exception):
    """Base exception for Entity Store errors."""


class StoreUnavailableError(EntityStoreError):
    """The underlying storage failed or could not be reached."""


class NotFoundError(EntityStoreError):
    """Record with given ID does not exist."""


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist."""


class CommissionNotFoundError(NotFoundError):
    """Commission with given ID does not exist."""


class RegistrationNotFoundError(NotFoundError):
    """Registration with given ID does not exist."""


class CommissionCodeExistsError(EntityStoreError):
    """Commission with given code already exists."""


class EnrollmentGuardError(EntityStoreError):
    """A commission write was refused because of its current enrollment."""
