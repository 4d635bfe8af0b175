"""Registration model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Time, UniqueConstraint
from campus_connect.database import Base


class Registration(Base):
    """A student's sign-up for an event. Its presence is the registered state."""
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("student_id", "event_id", name="uq_registrations_student_event"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    event_date = Column(Date)
    event_time = Column(Time)
    registered_at = Column(DateTime, default=datetime.now, nullable=False)
