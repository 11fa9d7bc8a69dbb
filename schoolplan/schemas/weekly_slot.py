"""Weekly slot schemas for API request/response models.

Request bodies accept ``starts_at``/``ends_at`` as aliases of
``start_time``/``end_time``; everything downstream only sees the canonical
names.
"""

from datetime import datetime, time
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from schoolplan.schemas.catalog import DegreeRef, RoomRef, SubjectRef, TeacherRef
from schoolplan.utils.time_expression import format_clock


class WeeklySlotCreate(BaseModel):
    """Schema for creating a weekly slot.

    Attributes:
        degree_id: Degree id, slug or alias.
        subject_id: Subject ID.
        teacher_id: Teacher (user) ID.
        room_id: Optional room ID.
        day_of_week: 1 (Monday) to 7 (Sunday).
        period: Free-text period label.
        start_time: Start clock time, HH:MM.
        end_time: End clock time, HH:MM.
        title: Display title; derived when omitted.
    """

    degree_id: Union[int, str]
    subject_id: int
    teacher_id: int
    room_id: Optional[int] = None
    day_of_week: int = Field(..., ge=1, le=7)
    period: Optional[str] = None
    start_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("start_time", "starts_at")
    )
    end_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_time", "ends_at")
    )
    title: Optional[str] = Field(None, max_length=255)


class WeeklySlotUpdate(BaseModel):
    """Schema for a partial slot update; only supplied fields are applied."""

    degree_id: Optional[Union[int, str]] = None
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    room_id: Optional[int] = None
    day_of_week: Optional[int] = Field(None, ge=1, le=7)
    period: Optional[str] = None
    start_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("start_time", "starts_at")
    )
    end_time: Optional[str] = Field(
        None, validation_alias=AliasChoices("end_time", "ends_at")
    )
    title: Optional[str] = Field(None, max_length=255)


class WeeklySlotResponse(BaseModel):
    """Response schema for a weekly slot, with its relations embedded."""

    id: int
    degree_id: int
    subject_id: int
    teacher_id: int
    room_id: Optional[int] = None
    day_of_week: int
    period: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    title: Optional[str] = None
    degree: Optional[DegreeRef] = None
    subject: Optional[SubjectRef] = None
    teacher: Optional[TeacherRef] = None
    room: Optional[RoomRef] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _render_clock(cls, value):
        if isinstance(value, time):
            return format_clock(value)
        return value


class SlotConflictResponse(BaseModel):
    """Two overlapping slots and what they share."""

    first: WeeklySlotResponse
    second: WeeklySlotResponse
    reasons: list[str]

    model_config = {"from_attributes": True}
