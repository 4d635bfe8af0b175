"""Session lifecycle for the authenticated principal.

A session moves ``UNINITIALIZED -> LOADING -> AUTHENTICATED | ANONYMOUS`` when
``restore()`` reads the persisted principal from its storage. ``login`` and
``logout`` write through to the same storage. The session does not check
credentials; callers verify them first.
"""

import json
import logging
from enum import Enum

import jwt
from pydantic import ValidationError

from campus_connect.auth import jwt_handler
from campus_connect.auth.principal import ROLES, OrganizerPrincipal, StudentPrincipal, principal_from_row
from campus_connect.core.errors import SessionNotInitializedError

logger = logging.getLogger(__name__)

USER_KEY = 'user'
ROLE_KEY = 'userRole'
SESSION_CLAIM = 'session'


class SessionStatus(str, Enum):
    UNINITIALIZED = 'uninitialized'
    LOADING = 'loading'
    AUTHENTICATED = 'authenticated'
    ANONYMOUS = 'anonymous'


class MemoryStorage:
    """Key-value storage of string values held in a dict."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(values or {})

    def get_item(self, key: str) -> str | None:
        return self.values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove_item(self, key: str) -> None:
        self.values.pop(key, None)


class TokenStorage(MemoryStorage):
    """Storage whose values travel inside a signed bearer token.

    An absent, expired or tampered token loads as empty storage.
    """

    @classmethod
    def from_token(cls, token: str | None) -> 'TokenStorage':
        if not token:
            return cls()
        try:
            payload = jwt_handler.decode_access_token(token)
        except jwt.PyJWTError:
            logger.info('Ignoring invalid or expired session token')
            return cls()

        values = payload.get(SESSION_CLAIM)
        if not isinstance(values, dict):
            return cls()
        return cls({key: value for key, value in values.items() if isinstance(value, str)})

    def to_token(self) -> str | None:
        if not self.values:
            return None
        return jwt_handler.create_access_token(
            subject=self.values.get(ROLE_KEY, ''),
            claims={SESSION_CLAIM: dict(self.values)},
        )


def _parse_persisted(raw_user: str | None, raw_role: str | None):
    if not raw_user or not raw_role or raw_role not in ROLES:
        return None
    try:
        data = json.loads(raw_user)
        if not isinstance(data, dict):
            return None
        if data.get('role', raw_role) != raw_role:
            return None
        return principal_from_row(data, raw_role)
    except (ValueError, ValidationError):
        return None


class Session:
    def __init__(self, storage: MemoryStorage):
        self.storage = storage
        self.status = SessionStatus.UNINITIALIZED
        self._principal: StudentPrincipal | OrganizerPrincipal | None = None

    def restore(self) -> 'Session':
        self.status = SessionStatus.LOADING
        principal = None
        try:
            principal = _parse_persisted(self.storage.get_item(USER_KEY), self.storage.get_item(ROLE_KEY))
            if principal is None and self.storage.get_item(USER_KEY) is not None:
                logger.warning('Discarding malformed persisted session')
        finally:
            self._principal = principal
            self.status = SessionStatus.AUTHENTICATED if principal else SessionStatus.ANONYMOUS
        return self

    def _require_initialized(self) -> None:
        if self.status in (SessionStatus.UNINITIALIZED, SessionStatus.LOADING):
            raise SessionNotInitializedError('Session must be restored before use')

    @property
    def principal(self) -> StudentPrincipal | OrganizerPrincipal | None:
        self._require_initialized()
        return self._principal

    @property
    def role(self) -> str | None:
        self._require_initialized()
        return self._principal.role if self._principal else None

    @property
    def is_authenticated(self) -> bool:
        self._require_initialized()
        return self.status == SessionStatus.AUTHENTICATED

    def login(self, principal: StudentPrincipal | OrganizerPrincipal) -> None:
        self._require_initialized()
        self.storage.set_item(USER_KEY, principal.model_dump_json())
        self.storage.set_item(ROLE_KEY, principal.role)
        self._principal = principal
        self.status = SessionStatus.AUTHENTICATED

    def logout(self) -> None:
        self._require_initialized()
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(ROLE_KEY)
        self._principal = None
        self.status = SessionStatus.ANONYMOUS
