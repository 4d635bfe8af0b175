"""Domain errors raised by the store client, credential flows and rule engine.

Route handlers translate these into ``HTTPException`` with static messages;
none of them are retried.
"""

UNIQUE_VIOLATION = '23505'


class CampusConnectError(Exception):
    """Base class for expected, user-facing failures."""

    default_message = 'Something went wrong. Please try again.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthFailure(CampusConnectError):
    """Bad credentials. Never says whether the user or the password was wrong."""

    default_message = 'Invalid credentials'


class DuplicateKey(CampusConnectError):
    default_message = 'Record already exists'


class DuplicateRegistrationError(DuplicateKey):
    default_message = 'You are already registered for this event'


class IneligibleError(CampusConnectError):
    default_message = 'You are not eligible. Minimum 70% attendance required.'


class StoreError(CampusConnectError):
    """Any backend failure other than an expected business outcome."""

    default_message = 'Database unavailable. Please try again.'


class ConstraintViolation(StoreError):
    """An integrity constraint rejected a write; ``code`` is the SQLSTATE."""

    default_message = 'Constraint violation'

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        super().__init__(message)

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


class SessionNotInitializedError(RuntimeError):
    """Session was used before its persisted state was restored."""
