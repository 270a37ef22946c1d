"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header

from devcourses.admin import AdminOperations
from devcourses.capacity import CapacityManager
from devcourses.config import Settings
from devcourses.entity_store import EntityStore, create_entity_store
from devcourses.notifications import Notifier
from devcourses.registration import RegistrationWorkflow
from devcourses.seed import seed_demo_data

ADMIN_ROLE = "admin"


class AuthenticationError(Exception):
    """No caller identity was supplied."""


class AuthorizationError(Exception):
    """Caller lacks the role required for the route."""


@dataclass(frozen=True)
class Caller:
    """Identity of the caller, as asserted by the upstream session layer."""

    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass
class Services:
    """Core services sharing one Entity Store."""

    store: EntityStore
    capacity: CapacityManager
    workflow: RegistrationWorkflow
    admin: AdminOperations


def build_services(
    store: EntityStore,
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> Services:
    """Wire the core services around a store."""
    settings = settings if settings is not None else Settings()
    capacity = CapacityManager(store)
    return Services(
        store=store,
        capacity=capacity,
        workflow=RegistrationWorkflow(store, capacity, notifier=notifier),
        admin=AdminOperations(
            store, capacity, low_enrollment_threshold=settings.low_enrollment_threshold
        ),
    )


# Global services (initialized on app startup)
_services: Services | None = None


def init_services(settings: Settings, notifier: Notifier | None = None) -> Services:
    """Initialize the global services from settings."""
    global _services  # noqa: PLW0603
    store = create_entity_store(settings.store_backend, settings.db_path)
    if settings.seed_demo_data:
        seed_demo_data(store)
    _services = build_services(store, settings, notifier)
    return _services


def close_services() -> None:
    """Close the global services and their store."""
    global _services  # noqa: PLW0603
    if _services is not None:
        _services.store.close()
        _services = None


def get_services() -> Generator[Services, None, None]:
    """Dependency that provides the Services instance."""
    if _services is None:
        raise RuntimeError("Services not initialized. Call init_services() first.")
    yield _services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_capacity_manager(services: ServicesDep) -> CapacityManager:
    """Dependency that provides the CapacityManager."""
    return services.capacity


def get_workflow(services: ServicesDep) -> RegistrationWorkflow:
    """Dependency that provides the RegistrationWorkflow."""
    return services.workflow


def get_admin_operations(services: ServicesDep) -> AdminOperations:
    """Dependency that provides AdminOperations."""
    return services.admin


# Type aliases for dependency injection
CapacityDep = Annotated[CapacityManager, Depends(get_capacity_manager)]
WorkflowDep = Annotated[RegistrationWorkflow, Depends(get_workflow)]
AdminDep = Annotated[AdminOperations, Depends(get_admin_operations)]


def get_caller(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Caller:
    """Read the caller identity forwarded by the session layer."""
    if not x_user_id:
        raise AuthenticationError("Missing caller identity")
    return Caller(user_id=x_user_id, role=(x_user_role or "user").lower())


CallerDep = Annotated[Caller, Depends(get_caller)]


def require_admin(caller: CallerDep) -> Caller:
    """Dependency that only lets administrators through."""
    if not caller.is_admin:
        raise AuthorizationError(f"User '{caller.user_id}' is not an administrator")
    return caller
