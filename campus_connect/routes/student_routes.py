from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from campus_connect.auth.dependencies import ensure_database_ready, get_store, get_today, require_student
from campus_connect.auth.principal import STUDENT_ROLE, StudentPrincipal, principal_from_row
from campus_connect.core.errors import DuplicateRegistrationError, IneligibleError, StoreError
from campus_connect.services.notifications import upcoming_within
from campus_connect.services.registration import attempt_register, is_eligible, is_registered
from campus_connect.store import TableStore, eq, gte, in_

router = APIRouter(tags=['students'])


LOAD_FAILED = 'Could not load events. Please try again.'
REGISTRATION_FAILED = 'Registration failed. Please try again.'


class EventResponse(BaseModel):
    id: int
    title: str
    date: date
    time: time
    venue: str
    description: str
    organizer_id: int


class StudentEventResponse(EventResponse):
    is_registered: bool


class RegistrationResponse(BaseModel):
    id: int
    event_id: int
    student_id: int
    registered_at: datetime
    event: EventResponse | None = None


class NotificationResponse(BaseModel):
    label: str
    event: EventResponse


class DashboardResponse(BaseModel):
    student: StudentPrincipal
    is_eligible: bool
    upcoming_events: list[StudentEventResponse]
    registered_events: list[RegistrationResponse]
    notifications: list[NotificationResponse]


def load_live_student(student: StudentPrincipal, store: TableStore) -> StudentPrincipal:
    row = store.select('students', [eq('id', student.id)], single=True)
    if row is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Student account not found.')
    return principal_from_row(row, STUDENT_ROLE)


def fetch_upcoming_events(store: TableStore, today: date) -> list[dict]:
    return store.select('events', [gte('date', today)], order_by='date')


def fetch_registrations(student_id: int, store: TableStore) -> list[dict]:
    registrations = store.select('registrations', [eq('student_id', student_id)], order_by='registered_at')
    event_ids = [registration['event_id'] for registration in registrations]
    events = {event['id']: event for event in store.select('events', [in_('id', event_ids)])} if event_ids else {}
    return [{**registration, 'event': events.get(registration['event_id'])} for registration in registrations]


def fetch_notifications(store: TableStore, today: date) -> list[NotificationResponse]:
    candidates = store.select(
        'events',
        [in_('date', [today, today + timedelta(days=1)])],
        order_by='date',
    )
    return [
        NotificationResponse(label=notification.label, event=notification.event)
        for notification in upcoming_within(candidates, today)
    ]


def _with_registered_flag(events: list[dict], registrations: list[dict]) -> list[StudentEventResponse]:
    return [
        StudentEventResponse(**event, is_registered=is_registered(event['id'], registrations))
        for event in events
    ]


@router.get('/events', response_model=list[StudentEventResponse])
def list_upcoming_events(
    student: StudentPrincipal = Depends(require_student),
    store: TableStore = Depends(get_store),
    today: date = Depends(get_today),
):
    ensure_database_ready()

    try:
        registrations = fetch_registrations(student.id, store)
        return _with_registered_flag(fetch_upcoming_events(store, today), registrations)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED) from exc


@router.get('/registrations', response_model=list[RegistrationResponse])
def list_my_registrations(
    student: StudentPrincipal = Depends(require_student),
    store: TableStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return fetch_registrations(student.id, store)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED) from exc


@router.get('/notifications', response_model=list[NotificationResponse])
def list_notifications(
    student: StudentPrincipal = Depends(require_student),
    store: TableStore = Depends(get_store),
    today: date = Depends(get_today),
):
    del student
    ensure_database_ready()

    try:
        return fetch_notifications(store, today)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED) from exc


@router.get('/dashboard', response_model=DashboardResponse)
def student_dashboard(
    student: StudentPrincipal = Depends(require_student),
    store: TableStore = Depends(get_store),
    today: date = Depends(get_today),
):
    ensure_database_ready()

    try:
        live_student = load_live_student(student, store)
        registrations = fetch_registrations(live_student.id, store)
        return DashboardResponse(
            student=live_student,
            is_eligible=is_eligible(live_student),
            upcoming_events=_with_registered_flag(fetch_upcoming_events(store, today), registrations),
            registered_events=registrations,
            notifications=fetch_notifications(store, today),
        )
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LOAD_FAILED) from exc


@router.post(
    '/events/{event_id}/register',
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_for_event(
    event_id: int,
    student: StudentPrincipal = Depends(require_student),
    store: TableStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        event = store.select('events', [eq('id', event_id)], single=True)
        if event is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Event not found.')

        # Eligibility is decided on the stored attendance, not the session copy.
        live_student = load_live_student(student, store)
        registration = attempt_register(live_student, event, store)
    except IneligibleError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message) from exc
    except DuplicateRegistrationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=REGISTRATION_FAILED) from exc

    return RegistrationResponse(**registration, event=event)
