"""Fixtures for API route tests."""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from devcourses.api import register_exception_handlers
from devcourses.api.dependencies import Services, build_services, get_services
from devcourses.api.routes import admin, courses, health, registrations
from devcourses.entity_store import EntityStore

ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
USER_HEADERS = {"X-User-Id": "user-1", "X-User-Role": "user"}


@pytest.fixture
def services(store: EntityStore) -> Services:
    """Core services over the parametrized store."""
    return build_services(store)


@pytest.fixture
def app(services: Services) -> FastAPI:
    """Create a test FastAPI app with the services dependency overridden."""
    app = FastAPI()
    register_exception_handlers(app)

    def override_get_services() -> Iterator[Services]:
        yield services

    app.dependency_overrides[get_services] = override_get_services

    for module in (courses, registrations, admin, health):
        app.include_router(module.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return dict(ADMIN_HEADERS)


@pytest.fixture
def user_headers() -> dict[str, str]:
    return dict(USER_HEADERS)
