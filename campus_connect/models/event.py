"""Event model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, Time
from campus_connect.database import Base


class Event(Base):
    """A campus event owned by exactly one organizer."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)
    venue = Column(String, nullable=False)
    description = Column(Text, nullable=False, default='')
    organizer_id = Column(Integer, ForeignKey("organizers.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.now)
