"""Data models for the Registration Workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from pydantic import BaseModel, Field, field_validator

from devcourses.entity_store import CommunityAffiliation

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
EXTERNAL_HANDLE_PATTERN = r"^.+#\d{4}$"


class RegistrationStep(IntEnum):
    """Registration flow steps, in order."""

    STARTED = 0
    COURSE_SELECTED = 1
    COMMISSION_SELECTED = 2
    PERSONAL_INFO_COLLECTED = 3
    CONFIRMED = 4


class PersonalInfo(BaseModel):
    """Registrant details collected before confirmation."""

    full_name: str = Field(..., min_length=2, max_length=255)
    pronouns: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    external_handle: str = Field(..., max_length=100, pattern=EXTERNAL_HANDLE_PATTERN)
    community_affiliation: CommunityAffiliation | None = None
    data_consent: bool
    newsletter: bool = False

    @field_validator("full_name", "pronouns")
    @classmethod
    def strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("data_consent")
    @classmethod
    def consent_given(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("data consent is required to register")
        return value


@dataclass
class RegistrationDraft:
    """One registrant's progress through the flow.

    Attributes:
        step: Furthest step reached and not undone.
        course_id: Selected course, once chosen.
        commission_id: Selected commission, once chosen. Holds no seat.
        personal_info: Validated personal details, once submitted.
        registration_id: Stored registration, once confirmed.
    """

    step: RegistrationStep = RegistrationStep.STARTED
    course_id: str | None = None
    commission_id: str | None = None
    personal_info: PersonalInfo | None = None
    registration_id: str | None = None

    @property
    def is_confirmed(self) -> bool:
        return self.step is RegistrationStep.CONFIRMED
