"""Login and signup flows for students and organizers.

Signup pre-checks the unique keys so the user gets a friendly message early,
but the database constraint is what actually decides: a unique violation on
insert is reported as ``DuplicateKey`` too.
"""

import logging

from campus_connect.auth.passwords import hash_password, verify_password
from campus_connect.auth.principal import (
    ORGANIZER_ROLE,
    STUDENT_ROLE,
    OrganizerPrincipal,
    StudentPrincipal,
    principal_from_row,
)
from campus_connect.core import config
from campus_connect.core.errors import AuthFailure, ConstraintViolation, DuplicateKey
from campus_connect.store import TableStore, eq

logger = logging.getLogger(__name__)

STUDENT_AUTH_FAILURE = 'Invalid roll number or password'
ORGANIZER_AUTH_FAILURE = 'Invalid email or password'
STUDENT_EXISTS = 'Roll number or email already exists'
ORGANIZER_EXISTS = 'Email already exists'


def is_institutional_email(email: str) -> bool:
    normalized = email.strip().lower()
    return any(normalized.endswith(f'@{domain.lower()}') for domain in config.ORGANIZER_EMAIL_DOMAINS)


def institutional_domains_message() -> str:
    return 'Email must end with ' + ' or '.join(f'@{domain}' for domain in config.ORGANIZER_EMAIL_DOMAINS)


def verify_student(store: TableStore, roll_no: str, password: str) -> StudentPrincipal:
    row = store.select('students', [eq('roll_no', roll_no)], single=True)
    if row is None or not verify_password(row.get('password_hash'), password):
        raise AuthFailure(STUDENT_AUTH_FAILURE)
    return principal_from_row(row, STUDENT_ROLE)


def verify_organizer(store: TableStore, email: str, password: str) -> OrganizerPrincipal:
    row = store.select('organizers', [eq('email', email)], single=True)
    if row is None or not verify_password(row.get('password_hash'), password):
        raise AuthFailure(ORGANIZER_AUTH_FAILURE)
    return principal_from_row(row, ORGANIZER_ROLE)


def _insert_account(store: TableStore, table: str, row: dict, duplicate_message: str) -> dict:
    try:
        created = store.insert(table, [row])[0]
    except ConstraintViolation as exc:
        if exc.is_unique_violation:
            logger.info('Signup for %s lost a uniqueness race', table)
            raise DuplicateKey(duplicate_message) from exc
        raise
    created.pop('password_hash', None)
    return created


def signup_student(
    store: TableStore,
    *,
    name: str,
    roll_no: str,
    dept: str,
    year: int,
    email: str,
    password: str,
) -> dict:
    existing = store.select(
        'students',
        any_of=[eq('roll_no', roll_no), eq('email', email)],
        single=True,
    )
    if existing is not None:
        raise DuplicateKey(STUDENT_EXISTS)

    return _insert_account(
        store,
        'students',
        {
            'name': name,
            'roll_no': roll_no,
            'dept': dept,
            'year': year,
            'email': email,
            'password_hash': hash_password(password),
            'attendance_percentage': 0,
        },
        STUDENT_EXISTS,
    )


def signup_organizer(store: TableStore, *, name: str, email: str, password: str) -> dict:
    if not is_institutional_email(email):
        raise ValueError(institutional_domains_message())

    existing = store.select('organizers', [eq('email', email)], single=True)
    if existing is not None:
        raise DuplicateKey(ORGANIZER_EXISTS)

    return _insert_account(
        store,
        'organizers',
        {'name': name, 'email': email, 'password_hash': hash_password(password)},
        ORGANIZER_EXISTS,
    )
