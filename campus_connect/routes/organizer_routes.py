import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator

from campus_connect.auth.dependencies import ensure_database_ready, get_store, require_organizer
from campus_connect.auth.principal import OrganizerPrincipal
from campus_connect.core.errors import StoreError
from campus_connect.routes.student_routes import EventResponse
from campus_connect.store import TableStore, eq, in_

router = APIRouter(tags=['organizers'])

logger = logging.getLogger(__name__)

ROSTER_STUDENT_FIELDS = ('name', 'roll_no', 'email', 'dept', 'year')
MAX_EVENT_TITLE_LENGTH = 200


class CreateEventRequest(BaseModel):
    title: str
    date: date
    time: time
    venue: str
    description: str = ''

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        if len(normalized) > MAX_EVENT_TITLE_LENGTH:
            raise ValueError(f'Title must be {MAX_EVENT_TITLE_LENGTH} characters or fewer.')
        return normalized

    @field_validator('venue')
    @classmethod
    def validate_venue(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Venue is required.')
        return normalized

    @field_validator('description')
    @classmethod
    def normalize_description(cls, value: str) -> str:
        return value.strip()


class OrganizerEventResponse(EventResponse):
    registration_count: int


class RosterStudentResponse(BaseModel):
    name: str
    roll_no: str
    email: str
    dept: str
    year: int


class RosterEntryResponse(BaseModel):
    id: int
    registered_at: datetime
    student: RosterStudentResponse | None


class EventDetailsResponse(BaseModel):
    event: EventResponse
    registration_count: int
    registrations: list[RosterEntryResponse]


def count_registrations(event_id: int, store: TableStore) -> int:
    return store.select('registrations', [eq('event_id', event_id)], count=True)


def fetch_roster(event_id: int, store: TableStore) -> list[dict]:
    """Registrations for an event joined with student identity, newest first."""
    registrations = store.select(
        'registrations',
        [eq('event_id', event_id)],
        order_by='registered_at',
        descending=True,
    )
    student_ids = [registration['student_id'] for registration in registrations]
    students = {}
    if student_ids:
        students = {
            student['id']: {field: student[field] for field in ROSTER_STUDENT_FIELDS}
            for student in store.select('students', [in_('id', student_ids)])
        }

    return [
        {
            'id': registration['id'],
            'registered_at': registration['registered_at'],
            'student': students.get(registration['student_id']),
        }
        for registration in registrations
    ]


@router.get('/events', response_model=list[OrganizerEventResponse])
def list_my_events(
    organizer: OrganizerPrincipal = Depends(require_organizer),
    store: TableStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        events = store.select('events', [eq('organizer_id', organizer.id)], order_by='date')
        return [
            OrganizerEventResponse(**event, registration_count=count_registrations(event['id'], store))
            for event in events
        ]
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Could not load events. Please try again.',
        ) from exc


@router.post('/events', response_model=OrganizerEventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    data: CreateEventRequest,
    organizer: OrganizerPrincipal = Depends(require_organizer),
    store: TableStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        event = store.insert('events', [{**data.model_dump(), 'organizer_id': organizer.id}])[0]
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Failed to add event. Please try again.',
        ) from exc

    logger.info('Organizer %s created event %s', organizer.id, event['id'])
    return OrganizerEventResponse(**event, registration_count=0)


@router.get('/events/{event_id}', response_model=EventDetailsResponse)
def get_event_details(
    event_id: int,
    organizer: OrganizerPrincipal = Depends(require_organizer),
    store: TableStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        event = store.select('events', [eq('id', event_id)], single=True)
        if event is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Event not found.')
        if event['organizer_id'] != organizer.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Only the organizer who created this event can view its registrations.',
            )

        roster = fetch_roster(event_id, store)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Could not load event details. Please try again.',
        ) from exc

    return EventDetailsResponse(
        event=EventResponse(**event),
        registration_count=len(roster),
        registrations=roster,
    )
