import pytest
from fastapi.security import HTTPAuthorizationCredentials

from campus_connect.auth.dependencies import get_session


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    for module in ('auth_routes', 'student_routes', 'organizer_routes'):
        monkeypatch.setattr(f'campus_connect.routes.{module}.ensure_database_ready', lambda: None)


@pytest.fixture
def session_for():
    def _session_for(token: str | None):
        credentials = HTTPAuthorizationCredentials(scheme='Bearer', credentials=token) if token else None
        return get_session(credentials)

    return _session_for
