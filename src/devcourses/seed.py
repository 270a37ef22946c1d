"""Demo catalog for development stores."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from devcourses.entity_store import CourseLevel

if TYPE_CHECKING:
    from devcourses.entity_store import Course, EntityStore

logger = logging.getLogger(__name__)

DEMO_COURSE = {
    "name": "Frontend Web Development",
    "description": (
        "A complete introduction to frontend web development with HTML, CSS and "
        "JavaScript, focused on modern responsive design."
    ),
    "level": CourseLevel.BEGINNER.value,
    "duration": "8 weeks",
    "total_weeks": 8,
    "start_date": "March 15",
}

DEMO_COMMISSIONS = [
    {
        "code": "FE101",
        "days": "Tuesday and Thursday",
        "time": "19:00 - 21:00",
        "instructor": "Alex Martinez",
        "max_capacity": 20,
        "start_date": "March 15",
    },
    {
        "code": "FE102",
        "days": "Saturday",
        "time": "10:00 - 14:00",
        "instructor": "Sam Rivera",
        "max_capacity": 15,
        "start_date": "March 18",
    },
]


def seed_demo_data(store: EntityStore) -> Course | None:
    """Load the demo course and its commissions into an empty store.

    Returns:
        The created course, or None if the store already had courses.
    """
    if store.list_courses():
        logger.info("Store already has courses, skipping demo seed")
        return None

    course = store.create_course(**DEMO_COURSE)
    for commission in DEMO_COMMISSIONS:
        store.create_commission(course_id=course.id, **commission)
    logger.info("Seeded demo course %s with %d commissions", course.name, len(DEMO_COMMISSIONS))
    return course
