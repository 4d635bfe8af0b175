import os
from datetime import date, time

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from campus_connect.auth.passwords import hash_password  # noqa: E402
from campus_connect.database import Base  # noqa: E402
from campus_connect.models import event, organizer, registration, student  # noqa: E402,F401
from campus_connect.store import TableStore  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db) -> TableStore:
    return TableStore(db)


@pytest.fixture
def make_student(store):
    counter = iter(range(1, 1000))

    def _make_student(attendance_percentage: float = 85, password: str = 'secret', **overrides) -> dict:
        number = next(counter)
        row = {
            'roll_no': f'22071A05{number:02d}',
            'name': f'Student {number}',
            'dept': 'CSE',
            'year': 3,
            'email': f'student{number}@example.com',
            'password_hash': hash_password(password),
            'attendance_percentage': attendance_percentage,
        }
        row.update(overrides)
        return store.insert('students', [row])[0]

    return _make_student


@pytest.fixture
def make_organizer(store):
    counter = iter(range(1, 1000))

    def _make_organizer(password: str = 'secret', **overrides) -> dict:
        number = next(counter)
        row = {
            'name': f'Organizer {number}',
            'email': f'organizer{number}@vnrvjiet.ac.in',
            'password_hash': hash_password(password),
        }
        row.update(overrides)
        return store.insert('organizers', [row])[0]

    return _make_organizer


@pytest.fixture
def make_event(store, make_organizer):
    def _make_event(event_date: date, organizer_id: int | None = None, **overrides) -> dict:
        if organizer_id is None:
            organizer_id = make_organizer()['id']
        row = {
            'title': 'Tech Talk',
            'date': event_date,
            'time': time(10, 0),
            'venue': 'Seminar Hall',
            'description': 'An evening of talks.',
            'organizer_id': organizer_id,
        }
        row.update(overrides)
        return store.insert('events', [row])[0]

    return _make_event
