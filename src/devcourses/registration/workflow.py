"""RegistrationWorkflow - the course, commission, details, confirm flow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from devcourses.capacity import CapacityExceededError, CommissionInactiveError
from devcourses.entity_store import CommissionNotFoundError, CourseNotFoundError
from devcourses.logging import mask_email
from devcourses.notifications import LoggingNotifier, send_confirmation
from devcourses.registration.exceptions import (
    CommissionMismatchError,
    CourseUnavailableError,
    InvalidTransitionError,
)
from devcourses.registration.models import PersonalInfo, RegistrationDraft, RegistrationStep

if TYPE_CHECKING:
    from devcourses.capacity import CapacityManager
    from devcourses.entity_store import Commission, Course, EntityStore, Registration
    from devcourses.notifications import Notifier

logger = logging.getLogger(__name__)


class RegistrationWorkflow:
    """Drives registrants through the four registration steps.

    Steps only move forward, one at a time. go_back() moves the view one step
    back. Choosing a commission records intent only: the seat is reserved once,
    in confirm(), so abandoned drafts never hold seats.
    """

    def __init__(
        self,
        store: EntityStore,
        capacity: CapacityManager,
        notifier: Notifier | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            store: Entity Store for course/commission reads and registration writes.
            capacity: CapacityManager that owns seat reservations.
            notifier: Receives confirmations. Defaults to LoggingNotifier.
        """
        self.store = store
        self.capacity = capacity
        self.notifier: Notifier = notifier if notifier is not None else LoggingNotifier()

    def start(self) -> RegistrationDraft:
        """Begin a new registration."""
        return RegistrationDraft()

    def select_course(self, draft: RegistrationDraft, course_id: str) -> RegistrationDraft:
        """Choose the course.

        Raises:
            InvalidTransitionError: If the draft is not at the start step.
            CourseNotFoundError: If the course doesn't exist.
            CourseUnavailableError: If the course is inactive.
        """
        self._require_step(draft, RegistrationStep.STARTED, "select a course")
        self._get_active_course(course_id)

        if draft.course_id != course_id:
            draft.commission_id = None
        draft.course_id = course_id
        draft.step = RegistrationStep.COURSE_SELECTED
        return draft

    def select_commission(self, draft: RegistrationDraft, commission_id: str) -> RegistrationDraft:
        """Choose the commission. No seat is taken.

        Raises:
            InvalidTransitionError: If no course has been selected.
            CommissionNotFoundError: If the commission doesn't exist.
            CommissionMismatchError: If it belongs to another course.
            CommissionInactiveError: If it is not active.
        """
        self._require_step(draft, RegistrationStep.COURSE_SELECTED, "select a commission")
        commission = self._get_commission(commission_id)
        if commission.course_id != draft.course_id:
            raise CommissionMismatchError(
                f"Commission '{commission.code}' does not belong to course '{draft.course_id}'"
            )
        if not commission.is_active:
            raise CommissionInactiveError(f"Commission '{commission.code}' is not active")

        draft.commission_id = commission_id
        draft.step = RegistrationStep.COMMISSION_SELECTED
        return draft

    def submit_personal_info(
        self, draft: RegistrationDraft, info: PersonalInfo | dict[str, Any]
    ) -> RegistrationDraft:
        """Record the registrant's details.

        Raises:
            InvalidTransitionError: If no commission has been selected.
            pydantic.ValidationError: If a dict is given and fails validation.
        """
        self._require_step(draft, RegistrationStep.COMMISSION_SELECTED, "submit personal info")
        draft.personal_info = (
            info if isinstance(info, PersonalInfo) else PersonalInfo.model_validate(info)
        )
        draft.step = RegistrationStep.PERSONAL_INFO_COLLECTED
        return draft

    def go_back(self, draft: RegistrationDraft) -> RegistrationDraft:
        """Move the view one step back. Never touches seats.

        Raises:
            InvalidTransitionError: At the start, or once confirmed.
        """
        if draft.step is RegistrationStep.CONFIRMED:
            raise InvalidTransitionError("A confirmed registration cannot go back")
        if draft.step is RegistrationStep.STARTED:
            raise InvalidTransitionError("Already at the first step")
        draft.step = RegistrationStep(draft.step - 1)
        return draft

    def confirm(self, draft: RegistrationDraft) -> Registration:
        """Reserve the seat and store the registration.

        On CapacityExceededError or CommissionInactiveError the draft is sent
        back to commission selection and the error re-raised. If the
        registration cannot be stored the seat is released.

        Raises:
            InvalidTransitionError: If personal info has not been collected.
            CapacityExceededError: If another registrant took the last seat.
            CommissionInactiveError: If the commission was cancelled meanwhile.
        """
        self._require_step(draft, RegistrationStep.PERSONAL_INFO_COLLECTED, "confirm")
        info = draft.personal_info
        if draft.course_id is None or draft.commission_id is None or info is None:
            raise InvalidTransitionError("Draft is missing its selections or personal info")

        course = self._get_active_course(draft.course_id)

        try:
            commission = self.capacity.reserve_seat(draft.commission_id)
        except (CapacityExceededError, CommissionInactiveError):
            draft.commission_id = None
            draft.step = RegistrationStep.COURSE_SELECTED
            raise

        try:
            registration = self.store.create_registration(
                course_id=course.id,
                commission_id=commission.id,
                full_name=info.full_name,
                pronouns=info.pronouns,
                email=info.email,
                external_handle=info.external_handle,
                data_consent=info.data_consent,
                community_affiliation=(
                    info.community_affiliation.value if info.community_affiliation else None
                ),
                newsletter=info.newsletter,
            )
        except Exception:
            logger.error(
                "Storing registration in %s failed, releasing the seat", commission.code
            )
            self.capacity.release_seat(commission.id)
            raise

        draft.registration_id = registration.id
        draft.step = RegistrationStep.CONFIRMED
        logger.info(
            "Registration %s confirmed for %s in %s",
            registration.id,
            mask_email(info.email),
            commission.code,
        )

        send_confirmation(self.notifier, registration, course, commission)
        return registration

    def register(
        self,
        course_id: str,
        commission_id: str,
        info: PersonalInfo | dict[str, Any],
    ) -> Registration:
        """Run the whole flow in one call.

        Raises:
            Whatever the individual steps raise.
        """
        draft = self.start()
        self.select_course(draft, course_id)
        self.select_commission(draft, commission_id)
        self.submit_personal_info(draft, info)
        return self.confirm(draft)

    def _require_step(
        self, draft: RegistrationDraft, expected: RegistrationStep, action: str
    ) -> None:
        if draft.step is not expected:
            raise InvalidTransitionError(
                f"Cannot {action} at step {draft.step.name} (expected {expected.name})"
            )

    def _get_active_course(self, course_id: str) -> Course:
        course = self.store.get_course(course_id)
        if course is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        if not course.is_active:
            raise CourseUnavailableError(f"Course '{course.name}' is not active")
        return course

    def _get_commission(self, commission_id: str) -> Commission:
        commission = self.store.get_commission(commission_id)
        if commission is None:
            raise CommissionNotFoundError(f"Commission with id '{commission_id}' not found")
        return commission
