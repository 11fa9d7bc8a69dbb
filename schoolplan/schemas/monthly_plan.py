"""Monthly plan schemas for API request/response models.

``enseignant_id`` is accepted as an alias of ``teacher_id`` in request bodies.
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from schoolplan.schemas.catalog import DegreeRef, SubjectRef, TeacherRef


class MonthlyPlanUpsert(BaseModel):
    """Schema for creating or updating a plan entry by natural key.

    Attributes:
        plan_date: Planned date (YYYY-MM-DD).
        degree_id: Degree id, slug or alias.
        subject_id: Subject ID.
        teacher_id: Optional teacher (user) ID.
        title: Optional title.
        notes: Optional notes.
        sequence: Optional explicit sequence; omitted means a new entry.
    """

    plan_date: date
    degree_id: Union[int, str]
    subject_id: int
    teacher_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("teacher_id", "enseignant_id")
    )
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    sequence: Optional[int] = Field(None, ge=1)


class MonthlyPlanUpdate(BaseModel):
    """Schema for a direct patch of a plan entry."""

    plan_date: Optional[date] = None
    degree_id: Optional[Union[int, str]] = None
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("teacher_id", "enseignant_id")
    )
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    sequence: Optional[int] = Field(None, ge=1)


class MonthlyPlanResponse(BaseModel):
    """Response schema for a plan entry, with its relations embedded."""

    id: int
    plan_date: date
    degree_id: int
    subject_id: int
    teacher_id: Optional[int] = None
    sequence: int
    title: Optional[str] = None
    notes: Optional[str] = None
    degree: Optional[DegreeRef] = None
    subject: Optional[SubjectRef] = None
    teacher: Optional[TeacherRef] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
