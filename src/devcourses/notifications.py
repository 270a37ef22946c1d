"""Registration notifications.

Delivery is fire-and-forget: a failing notifier is logged and never undoes a
registration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from devcourses.logging import mask_email

if TYPE_CHECKING:
    from devcourses.entity_store import Commission, Course, Registration

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Interface for the external notification sender."""

    def registration_confirmed(
        self, registration: Registration, course: Course, commission: Commission
    ) -> None:
        """Tell the registrant their seat is taken."""
        ...


class LoggingNotifier:
    """Notifier that records the would-be message in the log."""

    def registration_confirmed(
        self, registration: Registration, course: Course, commission: Commission
    ) -> None:
        logger.info(
            "Registration %s: notify %s about %s / %s (%s %s)",
            registration.id,
            mask_email(registration.email),
            course.name,
            commission.code,
            commission.days,
            commission.time,
        )


def send_confirmation(
    notifier: Notifier,
    registration: Registration,
    course: Course,
    commission: Commission,
) -> bool:
    """Hand a confirmation to the notifier without letting it fail the caller.

    Returns:
        True if the notifier accepted the message.
    """
    try:
        notifier.registration_confirmed(registration, course, commission)
    except Exception:
        logger.exception("Notification for registration %s failed", registration.id)
        return False
    return True
