"""Student model definitions."""

from sqlalchemy import Column, Float, Integer, String
from campus_connect.database import Base


class Student(Base):
    """A student account; attendance gates event registration."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    dept = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    attendance_percentage = Column(Float, nullable=False, default=0)
