import pytest

from campus_connect.auth import credentials
from campus_connect.auth.principal import OrganizerPrincipal, StudentPrincipal
from campus_connect.core.errors import AuthFailure, DuplicateKey
from campus_connect.store import eq

STUDENT_FIELDS = {
    'name': 'Asha',
    'roll_no': '22071A0501',
    'dept': 'CSE',
    'year': 3,
    'email': 'asha@example.com',
    'password': 'pa55word',
}


@pytest.mark.parametrize(
    ('email', 'expected'),
    [
        ('user@vnrvjiet.ac.in', True),
        ('user@vnrvjiet.in', True),
        (' User@VNRVJIET.IN ', True),
        ('user@gmail.com', False),
        ('user@notvnrvjiet.in', False),
        ('user@vnrvjiet.in.evil.com', False),
    ],
)
def test_is_institutional_email(email: str, expected: bool) -> None:
    assert credentials.is_institutional_email(email) is expected


def test_signup_student_hashes_password_and_defaults_attendance(store) -> None:
    created = credentials.signup_student(store, **STUDENT_FIELDS)

    stored = store.select('students', [eq('id', created['id'])], single=True)
    assert 'password_hash' not in created
    assert stored['password_hash'] != 'pa55word'
    assert stored['attendance_percentage'] == 0


@pytest.mark.parametrize('overrides', [{'email': 'other@example.com'}, {'roll_no': 'OTHER'}])
def test_signup_student_rejects_existing_roll_no_or_email(store, overrides: dict) -> None:
    credentials.signup_student(store, **STUDENT_FIELDS)

    with pytest.raises(DuplicateKey) as exception_info:
        credentials.signup_student(store, **{**STUDENT_FIELDS, **overrides})

    assert exception_info.value.message == 'Roll number or email already exists'


def test_signup_student_reports_constraint_race_as_duplicate(store, monkeypatch: pytest.MonkeyPatch) -> None:
    credentials.signup_student(store, **STUDENT_FIELDS)
    monkeypatch.setattr(store, 'select', lambda *_args, **_kwargs: None)

    with pytest.raises(DuplicateKey):
        credentials.signup_student(store, **STUDENT_FIELDS)


def test_signup_organizer_rejects_non_institutional_email(store) -> None:
    with pytest.raises(ValueError):
        credentials.signup_organizer(store, name='Ravi', email='user@gmail.com', password='x')

    assert store.select('organizers', count=True) == 0


def test_signup_organizer_accepts_institutional_email_once(store) -> None:
    created = credentials.signup_organizer(store, name='Ravi', email='user@vnrvjiet.ac.in', password='x')

    assert created['email'] == 'user@vnrvjiet.ac.in'
    with pytest.raises(DuplicateKey) as exception_info:
        credentials.signup_organizer(store, name='Ravi', email='user@vnrvjiet.ac.in', password='y')
    assert exception_info.value.message == 'Email already exists'


def test_verify_student_returns_principal(store) -> None:
    credentials.signup_student(store, **STUDENT_FIELDS)

    principal = credentials.verify_student(store, '22071A0501', 'pa55word')

    assert isinstance(principal, StudentPrincipal)
    assert principal.roll_no == '22071A0501'


@pytest.mark.parametrize(('roll_no', 'password'), [('22071A0501', 'wrong'), ('UNKNOWN', 'pa55word')])
def test_verify_student_failures_share_a_generic_message(store, roll_no: str, password: str) -> None:
    credentials.signup_student(store, **STUDENT_FIELDS)

    with pytest.raises(AuthFailure) as exception_info:
        credentials.verify_student(store, roll_no, password)

    assert exception_info.value.message == 'Invalid roll number or password'


def test_verify_organizer(store) -> None:
    credentials.signup_organizer(store, name='Ravi', email='ravi@vnrvjiet.in', password='x')

    assert isinstance(credentials.verify_organizer(store, 'ravi@vnrvjiet.in', 'x'), OrganizerPrincipal)
    with pytest.raises(AuthFailure) as exception_info:
        credentials.verify_organizer(store, 'ravi@vnrvjiet.in', 'nope')
    assert exception_info.value.message == 'Invalid email or password'
