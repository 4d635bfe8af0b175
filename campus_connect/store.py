"""Generic table-query client over a SQLAlchemy session.

Rows go in and come out as plain dicts so callers never hold ORM instances.
Integrity failures surface as ``ConstraintViolation`` carrying the SQLSTATE,
everything else the database raises surfaces as ``StoreError``.
"""

import logging
import operator
from typing import Any, NamedTuple, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_connect.core.errors import UNIQUE_VIOLATION, ConstraintViolation, StoreError
from campus_connect.models.event import Event
from campus_connect.models.organizer import Organizer
from campus_connect.models.registration import Registration
from campus_connect.models.student import Student

logger = logging.getLogger(__name__)

TABLES = {
    'students': Student,
    'organizers': Organizer,
    'events': Event,
    'registrations': Registration,
}

_OPERATORS = {
    'eq': operator.eq,
    'neq': operator.ne,
    'gt': operator.gt,
    'gte': operator.ge,
    'lt': operator.lt,
    'lte': operator.le,
    'in': lambda column, value: column.in_(list(value)),
}

# SQLite reports integrity failures by message only.
_SQLITE_CONSTRAINT_CODES = (
    ('UNIQUE constraint failed', UNIQUE_VIOLATION),
    ('NOT NULL constraint failed', '23502'),
    ('FOREIGN KEY constraint failed', '23503'),
    ('CHECK constraint failed', '23514'),
)
INTEGRITY_VIOLATION = '23000'


class Filter(NamedTuple):
    column: str
    op: str
    value: Any


def eq(column: str, value: Any) -> Filter:
    return Filter(column, 'eq', value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, 'gte', value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, 'lte', value)


def in_(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, 'in', values)


def constraint_code(exc: IntegrityError) -> str:
    original = exc.orig
    code = getattr(original, 'pgcode', None) or getattr(original, 'sqlstate', None)
    if code:
        return code

    message = str(original)
    for fragment, sqlite_code in _SQLITE_CONSTRAINT_CODES:
        if fragment in message:
            return sqlite_code
    return INTEGRITY_VIOLATION


def as_row(instance) -> dict:
    return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}


class TableStore:
    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f'Unknown table: {table}') from None

    def _column(self, model, name: str):
        if name not in model.__table__.columns:
            raise ValueError(f'Unknown column {name!r} on {model.__tablename__}')
        return getattr(model, name)

    def _clause(self, model, condition: Filter):
        if condition.op not in _OPERATORS:
            raise ValueError(f'Unsupported filter operator: {condition.op}')
        return _OPERATORS[condition.op](self._column(model, condition.column), condition.value)

    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        *,
        any_of: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        single: bool = False,
        count: bool = False,
    ):
        """Return matching rows, the first row (``single``), or a row count (``count``)."""
        model = self._model(table)
        clauses = [self._clause(model, condition) for condition in filters]
        if any_of:
            clauses.append(or_(*(self._clause(model, condition) for condition in any_of)))
        ordering = None
        if order_by is not None:
            ordering = self._column(model, order_by)
            ordering = ordering.desc() if descending else ordering.asc()

        try:
            query = self.db.query(model).filter(*clauses)
            if count:
                return query.count()
            if ordering is not None:
                query = query.order_by(ordering, model.id.desc() if descending else model.id.asc())
            if single:
                instance = query.first()
                return as_row(instance) if instance is not None else None
            return [as_row(instance) for instance in query.all()]
        except SQLAlchemyError as exc:
            logger.exception('Select on %s failed', table)
            raise StoreError() from exc

    def insert(self, table: str, rows: Sequence[dict]) -> list[dict]:
        model = self._model(table)
        instances = [model(**row) for row in rows]

        try:
            self.db.add_all(instances)
            self.db.commit()
            for instance in instances:
                self.db.refresh(instance)
        except IntegrityError as exc:
            self.db.rollback()
            code = constraint_code(exc)
            logger.warning('Insert into %s rejected by constraint (code %s)', table, code)
            raise ConstraintViolation(code) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Insert into %s failed', table)
            raise StoreError() from exc

        return [as_row(instance) for instance in instances]
