"""Reference-data schemas embedded in planning responses."""

from typing import Optional

from pydantic import BaseModel


class DegreeRef(BaseModel):
    """Degree as embedded in slot and plan payloads."""

    id: int
    name: str

    model_config = {"from_attributes": True}


class DegreeResponse(BaseModel):
    """Response schema for a canonical degree.

    Attributes:
        id: Degree ID.
        name: Display label.
        slug: Stable identifier, also accepted wherever a degree is expected.
        position: Display order.
    """

    id: int
    name: str
    slug: Optional[str] = None
    position: int

    model_config = {"from_attributes": True}


class SubjectRef(BaseModel):
    """Subject as embedded in slot and plan payloads."""

    id: int
    name: str

    model_config = {"from_attributes": True}


class SubjectResponse(BaseModel):
    """Response schema for subject."""

    id: int
    name: str
    code: Optional[str] = None

    model_config = {"from_attributes": True}


class TeacherRef(BaseModel):
    """Teacher (user) as embedded in slot and plan payloads."""

    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None

    model_config = {"from_attributes": True}


class RoomRef(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}
