import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ValidationInfo, field_validator

from campus_connect.auth import credentials as account
from campus_connect.auth.dependencies import ensure_database_ready, get_session, get_store
from campus_connect.auth.session import Session, TokenStorage
from campus_connect.core import config
from campus_connect.core.errors import AuthFailure, DuplicateKey, StoreError
from campus_connect.store import TableStore

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

DEPARTMENTS = ('CSE', 'ECE', 'EEE', 'MECH', 'CIVIL', 'IT')
SIGNUP_SUCCESS = 'Account created successfully! Redirecting to login...'
LOGOUT_MESSAGE = 'Logged out. Discard your access token; it remains valid until it expires.'


def _required(value: str, label: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{label} is required.')
    return normalized


class StudentSignupRequest(BaseModel):
    name: str
    roll_no: str
    dept: str
    year: int
    email: str
    password: str

    @field_validator('name', 'roll_no')
    @classmethod
    def validate_required(cls, value: str, info: ValidationInfo) -> str:
        return _required(value, info.field_name.replace('_', ' ').capitalize())

    @field_validator('dept')
    @classmethod
    def validate_dept(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in DEPARTMENTS:
            raise ValueError('Invalid department.')
        return normalized

    @field_validator('year')
    @classmethod
    def validate_year(cls, value: int) -> int:
        if not 1 <= value <= 4:
            raise ValueError('Year must be between 1 and 4.')
        return value

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _required(value, 'Email').lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class OrganizerSignupRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _required(value, 'Name')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not account.is_institutional_email(normalized):
            raise ValueError(account.institutional_domains_message())
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class StudentLoginRequest(BaseModel):
    roll_no: str
    password: str

    @field_validator('roll_no')
    @classmethod
    def normalize_roll_no(cls, value: str) -> str:
        return value.strip()


class OrganizerLoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class SignupResponse(BaseModel):
    message: str
    redirect_to: str
    redirect_after_seconds: int
    user: dict


class LoginResponse(BaseModel):
    access_token: str | None
    token_type: str = 'bearer'
    role: str | None
    user: dict | None
    message: str | None = None


class SessionResponse(BaseModel):
    status: str
    role: str | None
    user: dict | None


def _signup_response(created: dict) -> SignupResponse:
    return SignupResponse(
        message=SIGNUP_SUCCESS,
        redirect_to='/login',
        redirect_after_seconds=config.SIGNUP_REDIRECT_SECONDS,
        user=created,
    )


def _start_session(principal) -> LoginResponse:
    storage = TokenStorage()
    session = Session(storage).restore()
    session.login(principal)
    return LoginResponse(
        access_token=storage.to_token(),
        role=session.role,
        user=session.principal.model_dump(),
    )


@router.post('/signup/student', response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup_student(data: StudentSignupRequest, store: TableStore = Depends(get_store)):
    ensure_database_ready()

    try:
        created = account.signup_student(store, **data.model_dump())
    except DuplicateKey as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Signup failed. Please try again.',
        ) from exc

    return _signup_response(created)


@router.post('/signup/organizer', response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup_organizer(data: OrganizerSignupRequest, store: TableStore = Depends(get_store)):
    ensure_database_ready()

    try:
        created = account.signup_organizer(store, **data.model_dump())
    except DuplicateKey as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Signup failed. Please try again.',
        ) from exc

    return _signup_response(created)


@router.post('/login/student', response_model=LoginResponse)
def login_student(data: StudentLoginRequest, store: TableStore = Depends(get_store)):
    ensure_database_ready()

    try:
        principal = account.verify_student(store, data.roll_no, data.password)
    except AuthFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Login failed. Please try again.',
        ) from exc

    return _start_session(principal)


@router.post('/login/organizer', response_model=LoginResponse)
def login_organizer(data: OrganizerLoginRequest, store: TableStore = Depends(get_store)):
    ensure_database_ready()

    try:
        principal = account.verify_organizer(store, data.email, data.password)
    except AuthFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Login failed. Please try again.',
        ) from exc

    return _start_session(principal)


@router.post('/logout', response_model=LoginResponse)
def logout(session: Session = Depends(get_session)):
    """Clear the session and return a null token.

    Tokens are not revoked server-side: a previously issued token stays valid
    until it expires, so clients must discard it.
    """
    if session.is_authenticated:
        logger.info('Logging out %s %s', session.role, session.principal.id)
    session.logout()
    return LoginResponse(access_token=None, role=None, user=None, message=LOGOUT_MESSAGE)


@router.get('/me', response_model=SessionResponse)
def me(session: Session = Depends(get_session)):
    principal = session.principal
    return SessionResponse(
        status=session.status.value,
        role=session.role,
        user=principal.model_dump() if principal else None,
    )
