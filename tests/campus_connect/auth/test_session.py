import json

import jwt
import pytest

from campus_connect.auth import jwt_handler
from campus_connect.auth.principal import OrganizerPrincipal, StudentPrincipal
from campus_connect.auth.session import (
    ROLE_KEY,
    USER_KEY,
    MemoryStorage,
    Session,
    SessionStatus,
    TokenStorage,
)
from campus_connect.core.errors import SessionNotInitializedError

STUDENT = StudentPrincipal(
    id=1,
    roll_no='22071A0501',
    name='Asha',
    dept='CSE',
    year=3,
    email='asha@example.com',
    attendance_percentage=85,
)
ORGANIZER = OrganizerPrincipal(id=2, name='Ravi', email='ravi@vnrvjiet.ac.in')


def test_new_session_is_uninitialized_until_restored() -> None:
    session = Session(MemoryStorage())

    assert session.status == SessionStatus.UNINITIALIZED
    with pytest.raises(SessionNotInitializedError):
        session.principal
    with pytest.raises(SessionNotInitializedError):
        session.login(STUDENT)


def test_restore_with_empty_storage_is_anonymous() -> None:
    session = Session(MemoryStorage()).restore()

    assert session.status == SessionStatus.ANONYMOUS
    assert session.principal is None
    assert session.role is None


@pytest.mark.parametrize('principal', [STUDENT, ORGANIZER])
def test_login_survives_reload(principal) -> None:
    storage = MemoryStorage()
    Session(storage).restore().login(principal)

    reloaded = Session(storage).restore()

    assert reloaded.status == SessionStatus.AUTHENTICATED
    assert reloaded.principal == principal
    assert reloaded.role == principal.role


@pytest.mark.parametrize(
    'values',
    [
        {USER_KEY: '{not json', ROLE_KEY: 'student'},
        {USER_KEY: json.dumps([1, 2]), ROLE_KEY: 'student'},
        {USER_KEY: STUDENT.model_dump_json()},
        {USER_KEY: STUDENT.model_dump_json(), ROLE_KEY: 'admin'},
        {USER_KEY: STUDENT.model_dump_json(), ROLE_KEY: 'organizer'},
        {USER_KEY: json.dumps({'id': 1}), ROLE_KEY: 'student'},
    ],
)
def test_restore_with_malformed_storage_is_anonymous(values: dict) -> None:
    session = Session(MemoryStorage(values)).restore()

    assert session.status == SessionStatus.ANONYMOUS
    assert session.principal is None


def test_logout_clears_persisted_values() -> None:
    storage = MemoryStorage()
    session = Session(storage).restore()
    session.login(ORGANIZER)

    session.logout()

    assert storage.values == {}
    assert session.status == SessionStatus.ANONYMOUS
    assert Session(storage).restore().principal is None


def test_token_storage_round_trip() -> None:
    storage = TokenStorage()
    Session(storage).restore().login(STUDENT)

    reloaded = Session(TokenStorage.from_token(storage.to_token())).restore()

    assert reloaded.principal == STUDENT


def test_token_storage_ignores_token_signed_with_another_key() -> None:
    forged = jwt.encode(
        {'sub': 'student', 'session': {USER_KEY: STUDENT.model_dump_json(), ROLE_KEY: 'student'}},
        'not-the-server-secret',
        algorithm='HS256',
    )

    assert TokenStorage.from_token(forged).values == {}
    assert TokenStorage.from_token('garbage').values == {}


def test_token_storage_ignores_expired_token() -> None:
    token = jwt_handler.create_access_token(
        subject='student',
        expires_minutes=-1,
        claims={'session': {USER_KEY: STUDENT.model_dump_json(), ROLE_KEY: 'student'}},
    )

    assert Session(TokenStorage.from_token(token)).restore().status == SessionStatus.ANONYMOUS


def test_empty_token_storage_has_no_token() -> None:
    assert TokenStorage.from_token(None).to_token() is None
