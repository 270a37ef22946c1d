"""Entity Store - Storage for courses, commissions and registrations."""

from __future__ import annotations

from devcourses.entity_store.base import EntityStore
from devcourses.entity_store.exceptions import (
    CommissionCodeExistsError,
    CommissionNotFoundError,
    CourseNotFoundError,
    EnrollmentGuardError,
    EntityStoreError,
    NotFoundError,
    RegistrationNotFoundError,
    StoreUnavailableError,
)
from devcourses.entity_store.memory import MemoryEntityStore
from devcourses.entity_store.models import (
    DEFAULT_CAPACITY,
    MAX_CAPACITY,
    MIN_CAPACITY,
    Commission,
    CommunityAffiliation,
    Course,
    CourseLevel,
    Registration,
    RegistrationStatus,
)
from devcourses.entity_store.sql import SqlEntityStore

STORE_BACKENDS = ("memory", "sql")


def create_entity_store(backend: str = "memory", db_path: str = "devcourses.db") -> EntityStore:
    """Create the Entity Store backend named by configuration.

    Args:
        backend: "memory" or "sql".
        db_path: SQLite database path, used by the "sql" backend only.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if backend == "memory":
        return MemoryEntityStore()
    if backend == "sql":
        return SqlEntityStore(db_path)
    raise ValueError(f"Unknown store backend '{backend}' (expected one of {STORE_BACKENDS})")


__all__ = [
    "DEFAULT_CAPACITY",
    "MAX_CAPACITY",
    "MIN_CAPACITY",
    "STORE_BACKENDS",
    "Commission",
    "CommissionCodeExistsError",
    "CommissionNotFoundError",
    "CommunityAffiliation",
    "Course",
    "CourseLevel",
    "CourseNotFoundError",
    "EnrollmentGuardError",
    "EntityStore",
    "EntityStoreError",
    "MemoryEntityStore",
    "NotFoundError",
    "Registration",
    "RegistrationNotFoundError",
    "RegistrationStatus",
    "SqlEntityStore",
    "StoreUnavailableError",
    "create_entity_store",
]
