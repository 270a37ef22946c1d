"""Business-rule exceptions raised by the Capacity & Scheduling Manager.

These are expected outcomes, distinct from EntityStoreError infrastructure
failures.
"""


class CapacityError(Exception):
    """Base exception for capacity and scheduling rule violations."""


class CapacityExceededError(CapacityError):
    """Commission has no seats left."""


class CommissionInactiveError(CapacityError):
    """Commission is cancelled or otherwise not open for enrollment."""


class ScheduleConflictError(CapacityError):
    """Another active commission of the course has the same days and time."""


class InvalidCommissionError(CapacityError):
    """Commission data failed validation."""


class InvalidCapacityBoundsError(InvalidCommissionError):
    """Capacity outside the allowed bounds, or below current enrollment."""


class HasActiveEnrollmentsError(CapacityError):
    """Operation blocked because seats are taken."""
