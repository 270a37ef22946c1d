"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from devcourses import __version__
from devcourses.api.dependencies import (
    AuthenticationError,
    AuthorizationError,
    close_services,
    init_services,
)
from devcourses.api.models import APIResponse
from devcourses.api.routes import admin, courses, health, registrations
from devcourses.capacity import (
    CapacityExceededError,
    CommissionInactiveError,
    HasActiveEnrollmentsError,
    InvalidCommissionError,
    ScheduleConflictError,
)
from devcourses.config import Settings
from devcourses.entity_store import (
    CommissionCodeExistsError,
    CommissionNotFoundError,
    CourseNotFoundError,
    EntityStoreError,
    RegistrationNotFoundError,
    StoreUnavailableError,
)
from devcourses.registration import (
    CommissionMismatchError,
    CourseUnavailableError,
    InvalidTransitionError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable, Coroutine
    from typing import Any

logger = logging.getLogger(__name__)

# Exception type -> (HTTP status, fixed message). A None message exposes str(exc),
# used only for business-rule errors whose text is meant for the user.
ERROR_RESPONSES: list[tuple[type[Exception], int, str | None]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "Authentication required"),
    (AuthorizationError, status.HTTP_403_FORBIDDEN, "Administrator role required"),
    (CourseNotFoundError, status.HTTP_404_NOT_FOUND, "Course not found"),
    (CommissionNotFoundError, status.HTTP_404_NOT_FOUND, "Commission not found"),
    (RegistrationNotFoundError, status.HTTP_404_NOT_FOUND, "Registration not found"),
    (CapacityExceededError, status.HTTP_409_CONFLICT, "No seats available in this commission"),
    (CommissionInactiveError, status.HTTP_409_CONFLICT, "Commission is not open for enrollment"),
    (CourseUnavailableError, status.HTTP_409_CONFLICT, "Course is not open for enrollment"),
    (ScheduleConflictError, status.HTTP_409_CONFLICT, None),
    (HasActiveEnrollmentsError, status.HTTP_409_CONFLICT, None),
    (CommissionCodeExistsError, status.HTTP_409_CONFLICT, "Commission with this code already exists"),
    (InvalidTransitionError, status.HTTP_409_CONFLICT, None),
    (InvalidCommissionError, status.HTTP_422_UNPROCESSABLE_ENTITY, None),
    (CommissionMismatchError, status.HTTP_422_UNPROCESSABLE_ENTITY, None),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable"),
    (EntityStoreError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
]


def _make_handler(
    status_code: int, message: str | None
) -> Callable[[Request, Exception], Coroutine[Any, Any, JSONResponse]]:
    async def handler(_request: Request, exc: Exception) -> JSONResponse:
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s: %s", type(exc).__name__, exc)
        return JSONResponse(
            status_code=status_code,
            content=APIResponse[None](data=None, error=message or str(exc)).model_dump(),
        )

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain exceptions into APIResponse errors."""
    for exc_class, status_code, message in ERROR_RESPONSES:
        app.add_exception_handler(exc_class, _make_handler(status_code, message))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = app.state.settings if app.state.settings is not None else Settings.from_env()
    init_services(settings)
    logger.info(
        "DevCourses started (store=%s, low_enrollment_threshold=%d)",
        settings.store_backend,
        settings.low_enrollment_threshold,
    )
    yield
    close_services()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Read from the environment at startup when None.
    """
    app = FastAPI(
        title="DevCourses API",
        description="REST API for DevCourses - course registration",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
