import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from campus_connect.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")

engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_registration_schema_checked = False


def ensure_registration_schema() -> None:
    global _registration_schema_checked

    if _registration_schema_checked:
        return

    with _schema_lock:
        if _registration_schema_checked:
            return

        inspector = inspect(engine)
        table_names = inspector.get_table_names()

        if 'registrations' not in table_names:
            _registration_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('registrations')}
        migration_steps = [
            ('event_date', 'ALTER TABLE registrations ADD COLUMN event_date DATE'),
            ('event_time', 'ALTER TABLE registrations ADD COLUMN event_time TIME'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_registrations_student_event '
                    'ON registrations(student_id, event_id)'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_registrations_event_time ON registrations(event_id, registered_at)')
            )
            if 'events' in table_names:
                connection.execute(text('CREATE INDEX IF NOT EXISTS idx_events_date ON events(date)'))
                connection.execute(text('CREATE INDEX IF NOT EXISTS idx_events_organizer ON events(organizer_id)'))

        _registration_schema_checked = True
