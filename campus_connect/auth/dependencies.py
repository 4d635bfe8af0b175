from datetime import date

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError

from campus_connect.auth.principal import ORGANIZER_ROLE, STUDENT_ROLE, OrganizerPrincipal, StudentPrincipal
from campus_connect.auth.session import Session, TokenStorage
from campus_connect.database import SessionLocal, ensure_registration_schema
from campus_connect.store import TableStore

security = HTTPBearer(auto_error=False)


def ensure_database_ready() -> None:
    try:
        ensure_registration_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db=Depends(get_db)) -> TableStore:
    return TableStore(db)


def get_today() -> date:
    return date.today()


def get_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Session:
    token = credentials.credentials if credentials else None
    return Session(TokenStorage.from_token(token)).restore()


def _require_role(session: Session, role: str):
    if not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Not authenticated')
    if session.role != role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f'Only {role}s can access this page.')
    return session.principal


def require_student(session: Session = Depends(get_session)) -> StudentPrincipal:
    return _require_role(session, STUDENT_ROLE)


def require_organizer(session: Session = Depends(get_session)) -> OrganizerPrincipal:
    return _require_role(session, ORGANIZER_ROLE)
