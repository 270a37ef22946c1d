"""Admin Operations - commission lifecycle and enrollment reporting."""

from devcourses.admin.operations import COURSE_DEACTIVATED_REASON, AdminOperations

__all__ = [
    "COURSE_DEACTIVATED_REASON",
    "AdminOperations",
]
