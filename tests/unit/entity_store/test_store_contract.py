"""Contract tests run against every Entity Store backend."""

from collections.abc import Callable

import pytest

from devcourses.entity_store import (
    Commission,
    CommissionCodeExistsError,
    CommissionNotFoundError,
    Course,
    CourseNotFoundError,
    EnrollmentGuardError,
    EntityStore,
    MemoryEntityStore,
    RegistrationNotFoundError,
    RegistrationStatus,
    SqlEntityStore,
    create_entity_store,
)


def _register(store: EntityStore, commission: Commission, name: str = "Ada Lovelace"):
    return store.create_registration(
        course_id=commission.course_id,
        commission_id=commission.id,
        full_name=name,
        pronouns="she/her",
        email="ada@example.com",
        external_handle="ada#1815",
        data_consent=True,
    )


@pytest.mark.unit
class TestCourseOperations:
    """Tests for course CRUD."""

    def test_create_course_defaults(self, store: EntityStore) -> None:
        """Created course is active with generated ID and timestamp."""
        course = store.create_course(
            name="Backend",
            description="APIs",
            level="Intermediate",
            duration="10 weeks",
            total_weeks=10,
            start_date="April 1",
        )

        assert course.id is not None
        assert course.name == "Backend"
        assert course.level == "Intermediate"
        assert course.is_active is True
        assert course.created_at is not None

    def test_create_course_unknown_level_raises(self, store: EntityStore) -> None:
        """Levels outside the enum are rejected."""
        with pytest.raises(ValueError):
            store.create_course(
                name="X",
                description="Y",
                level="Expert",
                duration="1 week",
                total_weeks=1,
                start_date="May 1",
            )

    def test_get_course_missing_returns_none(self, store: EntityStore) -> None:
        """Unknown ID yields None."""
        assert store.get_course("nonexistent-id") is None

    def test_list_courses_active_only(
        self, store: EntityStore, make_course: Callable[..., Course]
    ) -> None:
        """Inactive courses are filtered on request."""
        active = make_course("Active")
        inactive = make_course("Inactive")
        store.update_course(inactive.id, is_active=False)

        all_ids = {c.id for c in store.list_courses()}
        active_ids = {c.id for c in store.list_courses(active_only=True)}

        assert all_ids == {active.id, inactive.id}
        assert active_ids == {active.id}

    def test_update_course_fields(self, store: EntityStore, course: Course) -> None:
        """Only provided fields change."""
        updated = store.update_course(course.id, name="Renamed", level="Advanced")

        assert updated.name == "Renamed"
        assert updated.level == "Advanced"
        assert updated.total_weeks == course.total_weeks

    def test_update_course_not_found_raises(self, store: EntityStore) -> None:
        """CourseNotFoundError for unknown ID."""
        with pytest.raises(CourseNotFoundError) as exc_info:
            store.update_course("nonexistent-id", name="X")

        assert "nonexistent-id" in str(exc_info.value)

    def test_update_course_rejects_unknown_field(self, store: EntityStore, course: Course) -> None:
        """Fields outside the updatable set raise ValueError."""
        with pytest.raises(ValueError, match="id"):
            store.update_course(course.id, id="other")


@pytest.mark.unit
class TestCommissionOperations:
    """Tests for commission CRUD."""

    def test_create_commission_starts_empty(
        self, make_commission: Callable[..., Commission]
    ) -> None:
        """New commissions are active with zero enrollment."""
        commission = make_commission(max_capacity=12)

        assert commission.current_enrollment == 0
        assert commission.max_capacity == 12
        assert commission.is_active is True
        assert commission.cancel_reason is None

    def test_create_commission_unknown_course_raises(self, store: EntityStore) -> None:
        """CourseNotFoundError when the course doesn't exist."""
        with pytest.raises(CourseNotFoundError):
            store.create_commission(
                course_id="nonexistent-id",
                code="X1",
                days="Monday",
                time="18:00",
                instructor="Sam",
                start_date="June 1",
            )

    def test_create_commission_duplicate_code_raises(
        self, make_commission: Callable[..., Commission]
    ) -> None:
        """Codes are unique across all commissions."""
        make_commission(code="DUP1")

        with pytest.raises(CommissionCodeExistsError) as exc_info:
            make_commission(code="DUP1")

        assert "DUP1" in str(exc_info.value)

    def test_get_commissions_by_course(
        self,
        store: EntityStore,
        make_course: Callable[..., Course],
        make_commission: Callable[..., Commission],
    ) -> None:
        """Only the course's own commissions are returned."""
        other = make_course("Other")
        first = make_commission()
        second = make_commission()
        make_commission(course_id=other.id)

        found = store.get_commissions_by_course(first.course_id)

        assert {c.id for c in found} == {first.id, second.id}

    def test_update_commission_fields(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Schedule and cancellation fields can be written."""
        commission = make_commission()

        updated = store.update_commission(
            commission.id, days="Friday", is_active=False, cancel_reason="Instructor left"
        )

        assert updated.days == "Friday"
        assert updated.is_active is False
        assert updated.cancel_reason == "Instructor left"

    @pytest.mark.parametrize("field", ["current_enrollment", "course_id", "id", "created_at"])
    def test_update_commission_rejects_protected_fields(
        self, store: EntityStore, make_commission: Callable[..., Commission], field: str
    ) -> None:
        """Enrollment and identity fields cannot be written through update."""
        commission = make_commission()

        with pytest.raises(ValueError, match=field):
            store.update_commission(commission.id, **{field: 3})

        assert store.get_commission(commission.id).current_enrollment == 0

    def test_update_commission_duplicate_code_raises(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Renaming onto an existing code fails."""
        make_commission(code="TAKEN")
        commission = make_commission()

        with pytest.raises(CommissionCodeExistsError):
            store.update_commission(commission.id, code="TAKEN")

    def test_update_commission_not_found_raises(self, store: EntityStore) -> None:
        """CommissionNotFoundError for unknown ID."""
        with pytest.raises(CommissionNotFoundError):
            store.update_commission("nonexistent-id", days="Monday")

    def test_delete_commission(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Deleted commissions are gone."""
        commission = make_commission()

        store.delete_commission(commission.id)

        assert store.get_commission(commission.id) is None

    def test_delete_commission_not_found_raises(self, store: EntityStore) -> None:
        """CommissionNotFoundError for unknown ID."""
        with pytest.raises(CommissionNotFoundError):
            store.delete_commission("nonexistent-id")

    def test_delete_commission_with_seats_refused(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """The delete only applies while enrollment is zero."""
        commission = make_commission()
        fill_seats(commission.id, 1)

        with pytest.raises(EnrollmentGuardError, match=commission.code):
            store.delete_commission(commission.id)

        assert store.get_commission(commission.id).current_enrollment == 1

    def test_update_capacity_below_enrollment_refused(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """A new max_capacity must hold the seats already taken; nothing is written otherwise."""
        commission = make_commission(max_capacity=20)
        fill_seats(commission.id, 6)

        with pytest.raises(EnrollmentGuardError):
            store.update_commission(commission.id, max_capacity=5, instructor="Sam")

        stored = store.get_commission(commission.id)
        assert stored.max_capacity == 20
        assert stored.instructor == commission.instructor

    def test_update_capacity_down_to_enrollment(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """Capacity may shrink to exactly the current enrollment."""
        commission = make_commission(max_capacity=20)
        fill_seats(commission.id, 6)

        assert store.update_commission(commission.id, max_capacity=6).max_capacity == 6

    def test_update_require_empty(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """require_empty writes to empty commissions and refuses enrolled ones."""
        empty = make_commission()
        busy = make_commission()
        fill_seats(busy.id, 1)

        closed = store.update_commission(empty.id, require_empty=True, is_active=False)
        with pytest.raises(EnrollmentGuardError):
            store.update_commission(busy.id, require_empty=True, is_active=False)

        assert closed.is_active is False
        assert store.get_commission(busy.id).is_active is True

    def test_list_commissions_in_creation_order(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
    ) -> None:
        """Creation order wins over code order, even within one second."""
        codes = ["ZZ9", "AA1", "MM5"]
        for code in codes:
            make_commission(code=code)

        assert [c.code for c in store.list_commissions()] == codes

    def test_returned_records_are_snapshots(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Mutating a returned record does not change what is stored."""
        commission = make_commission()
        commission.current_enrollment = 99

        assert store.get_commission(commission.id).current_enrollment == 0


@pytest.mark.unit
class TestConditionalIncrement:
    """Tests for conditionally_increment_enrollment."""

    def test_increment_below_ceiling(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Applies and reports success while seats remain."""
        commission = make_commission(max_capacity=2)

        assert store.conditionally_increment_enrollment(commission.id, 1, 2) is True
        assert store.get_commission(commission.id).current_enrollment == 1

    def test_increment_at_ceiling_refused(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """No write once the ceiling is reached."""
        commission = make_commission(max_capacity=2)
        fill_seats(commission.id, 2)

        assert store.conditionally_increment_enrollment(commission.id, 1, 2) is False
        assert store.get_commission(commission.id).current_enrollment == 2

    def test_increment_respects_stored_capacity(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """A ceiling above max_capacity does not allow overbooking."""
        commission = make_commission(max_capacity=1)

        assert store.conditionally_increment_enrollment(commission.id, 1, 50) is True
        assert store.conditionally_increment_enrollment(commission.id, 1, 50) is False

    def test_increment_inactive_refused(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Cancelled commissions take no new seats."""
        commission = make_commission()
        store.update_commission(commission.id, is_active=False, cancel_reason="Closed")

        assert store.conditionally_increment_enrollment(commission.id, 1, 20) is False

    def test_decrement_floored_at_zero(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Enrollment never goes negative."""
        commission = make_commission()

        assert store.conditionally_increment_enrollment(commission.id, -1, 20) is False
        assert store.get_commission(commission.id).current_enrollment == 0

    def test_decrement_allowed_on_inactive(
        self,
        store: EntityStore,
        make_commission: Callable[..., Commission],
        fill_seats: Callable[[str, int], None],
    ) -> None:
        """Seats can be given back after a commission is cancelled."""
        commission = make_commission()
        fill_seats(commission.id, 1)
        store.update_commission(commission.id, is_active=False, cancel_reason="Closed")

        assert store.conditionally_increment_enrollment(commission.id, -1, 20) is True
        assert store.get_commission(commission.id).current_enrollment == 0

    def test_unknown_commission_returns_false(self, store: EntityStore) -> None:
        """Unknown IDs report no write."""
        assert store.conditionally_increment_enrollment("nonexistent-id", 1, 20) is False

    def test_zero_delta_raises(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """A zero delta is a programming error."""
        commission = make_commission()

        with pytest.raises(ValueError):
            store.conditionally_increment_enrollment(commission.id, 0, 20)


@pytest.mark.unit
class TestRegistrationOperations:
    """Tests for registration storage."""

    def test_create_registration_pending(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """New registrations are pending and keep their fields."""
        commission = make_commission()

        registration = _register(store, commission)

        assert registration.id is not None
        assert registration.commission_id == commission.id
        assert registration.course_id == commission.course_id
        assert registration.status == RegistrationStatus.PENDING.value
        assert registration.newsletter is False
        assert registration.community_affiliation is None
        assert registration.created_at is not None

    def test_create_registration_unknown_commission_raises(
        self, store: EntityStore, course: Course
    ) -> None:
        """CommissionNotFoundError when the commission doesn't exist."""
        with pytest.raises(CommissionNotFoundError):
            store.create_registration(
                course_id=course.id,
                commission_id="nonexistent-id",
                full_name="Ada",
                pronouns="she/her",
                email="ada@example.com",
                external_handle="ada#1815",
                data_consent=True,
            )

    def test_create_registration_does_not_touch_enrollment(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Seats are counted by the capacity layer, not by storing registrations."""
        commission = make_commission()

        _register(store, commission)

        assert store.get_commission(commission.id).current_enrollment == 0

    def test_list_registrations_filters(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Filters by commission and status."""
        first = make_commission()
        second = make_commission()
        a = _register(store, first, "A")
        b = _register(store, second, "B")
        store.update_registration_status(b.id, RegistrationStatus.CONFIRMED)

        assert {r.id for r in store.list_registrations()} == {a.id, b.id}
        assert [r.id for r in store.list_registrations(commission_id=first.id)] == [a.id]
        confirmed = store.list_registrations(status=RegistrationStatus.CONFIRMED)
        assert [r.id for r in confirmed] == [b.id]

    def test_list_registrations_newest_first(
        self, store: EntityStore, make_commission: Callable[..., Commission]
    ) -> None:
        """Registrations made in quick succession come back newest first."""
        commission = make_commission()
        ids = [_register(store, commission, name).id for name in ("A", "B", "C")]

        assert [r.id for r in store.list_registrations()] == ids[::-1]

    def test_update_registration_status_not_found_raises(self, store: EntityStore) -> None:
        """RegistrationNotFoundError for unknown ID."""
        with pytest.raises(RegistrationNotFoundError):
            store.update_registration_status("nonexistent-id", RegistrationStatus.CANCELLED)


@pytest.mark.unit
class TestCreateEntityStore:
    """Tests for the backend factory."""

    def test_memory_backend(self) -> None:
        """'memory' builds a MemoryEntityStore."""
        assert isinstance(create_entity_store("memory"), MemoryEntityStore)

    def test_sql_backend(self) -> None:
        """'sql' builds a SqlEntityStore on the given path."""
        store = create_entity_store("sql", ":memory:")
        try:
            assert isinstance(store, SqlEntityStore)
        finally:
            store.close()

    def test_unknown_backend_raises(self) -> None:
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="redis"):
            create_entity_store("redis")
