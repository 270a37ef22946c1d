"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator
from itertools import count

import pytest

from devcourses.capacity import CapacityManager
from devcourses.entity_store import (
    Commission,
    Course,
    EntityStore,
    MemoryEntityStore,
    SqlEntityStore,
)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> Iterator[EntityStore]:
    """Each Entity Store backend in turn; SQL runs on an in-memory database."""
    s: EntityStore = MemoryEntityStore() if request.param == "memory" else SqlEntityStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def capacity(store: EntityStore) -> CapacityManager:
    """CapacityManager over the parametrized store."""
    return CapacityManager(store)


@pytest.fixture
def make_course(store: EntityStore) -> Callable[..., Course]:
    """Factory creating courses with sensible defaults."""

    def _make(name: str = "Frontend Web Development", **overrides: object) -> Course:
        values: dict[str, object] = {
            "description": "HTML, CSS and JavaScript from scratch.",
            "level": "Beginner",
            "duration": "8 weeks",
            "total_weeks": 8,
            "start_date": "March 15",
        }
        values.update(overrides)
        return store.create_course(name=name, **values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def course(make_course: Callable[..., Course]) -> Course:
    """One active course."""
    return make_course()


@pytest.fixture
def make_commission(store: EntityStore, course: Course) -> Callable[..., Commission]:
    """Factory creating commissions with unique codes, in `course` by default."""
    codes = count(1)

    def _make(**overrides: object) -> Commission:
        n = next(codes)
        values: dict[str, object] = {
            "course_id": course.id,
            "code": f"FE{n:03d}",
            "days": "Tuesday and Thursday",
            "time": f"{n:02d}:00",
            "instructor": "Alex Martinez",
            "start_date": "March 15",
            "max_capacity": 20,
        }
        values.update(overrides)
        return store.create_commission(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def fill_seats(store: EntityStore) -> Callable[[str, int], None]:
    """Take seats through the store's conditional write."""

    def _fill(commission_id: str, seats: int) -> None:
        commission = store.get_commission(commission_id)
        assert commission is not None
        for _ in range(seats):
            assert store.conditionally_increment_enrollment(
                commission_id, 1, commission.max_capacity
            )

    return _fill
