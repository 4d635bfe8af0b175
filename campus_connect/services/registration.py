"""Registration eligibility and outcome rules.

The database's unique constraint on (student_id, event_id) is the only thing
that guarantees one registration per student and event; ``is_registered`` is a
display hint over rows the caller already fetched.
"""

import logging
from typing import Iterable

from campus_connect.auth.principal import StudentPrincipal
from campus_connect.core import config
from campus_connect.core.errors import ConstraintViolation, DuplicateRegistrationError, IneligibleError
from campus_connect.store import TableStore

logger = logging.getLogger(__name__)


def ineligible_message() -> str:
    return f'You are not eligible. Minimum {config.MIN_ATTENDANCE_PERCENTAGE:g}% attendance required.'


def is_eligible(student: StudentPrincipal) -> bool:
    return student.attendance_percentage >= config.MIN_ATTENDANCE_PERCENTAGE


def is_registered(event_id: int, registrations: Iterable[dict]) -> bool:
    return any(registration['event_id'] == event_id for registration in registrations)


def attempt_register(student: StudentPrincipal, event: dict, store: TableStore) -> dict:
    """Insert a registration for ``student`` on ``event`` and return the stored row.

    Raises ``IneligibleError`` without touching the store when attendance is
    below the threshold, ``DuplicateRegistrationError`` when the row already
    exists, and ``StoreError`` for anything else. Callers re-fetch their
    registration list afterwards.
    """
    if not is_eligible(student):
        logger.info('Student %s below attendance threshold (%s%%)', student.id, student.attendance_percentage)
        raise IneligibleError(ineligible_message())

    try:
        registration = store.insert(
            'registrations',
            [
                {
                    'student_id': student.id,
                    'event_id': event['id'],
                    'event_date': event['date'],
                    'event_time': event['time'],
                }
            ],
        )[0]
    except ConstraintViolation as exc:
        if exc.is_unique_violation:
            raise DuplicateRegistrationError() from exc
        raise

    logger.info('Student %s registered for event %s', student.id, event['id'])
    return registration
