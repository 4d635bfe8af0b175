"""Organizer model definitions."""

from sqlalchemy import Column, Integer, String
from campus_connect.database import Base


class Organizer(Base):
    """An event organizer with an institutional email."""
    __tablename__ = "organizers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
