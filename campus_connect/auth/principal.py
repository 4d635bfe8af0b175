"""Authenticated principals, tagged by role at login time."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

STUDENT_ROLE = 'student'
ORGANIZER_ROLE = 'organizer'
ROLES = (STUDENT_ROLE, ORGANIZER_ROLE)


class StudentPrincipal(BaseModel):
    role: Literal['student'] = STUDENT_ROLE
    id: int
    roll_no: str
    name: str
    dept: str
    year: int
    email: str
    attendance_percentage: float = Field(default=0, ge=0, le=100)

    class Config:
        from_attributes = True


class OrganizerPrincipal(BaseModel):
    role: Literal['organizer'] = ORGANIZER_ROLE
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


Principal = Annotated[Union[StudentPrincipal, OrganizerPrincipal], Field(discriminator='role')]

principal_adapter = TypeAdapter(Principal)


def principal_from_row(row: dict, role: str) -> StudentPrincipal | OrganizerPrincipal:
    """Build the principal for ``role`` from a store row; extra columns are dropped."""
    return principal_adapter.validate_python({**row, 'role': role})
