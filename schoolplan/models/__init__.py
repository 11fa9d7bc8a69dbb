"""Data models package."""

from schoolplan.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    InvalidFilterError,
    ModelError,
    RecordNotFoundError,
)
from schoolplan.models.base import BaseModel
from schoolplan.models.degree import Degree
from schoolplan.models.monthly_plan import MonthlyPlanEntry
from schoolplan.models.room import Room
from schoolplan.models.subject import Subject
from schoolplan.models.user import User
from schoolplan.models.weekly_slot import WeeklySlot

__all__ = [
    "BaseModel",
    "ModelError",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "DatabaseConnectionError",
    "InvalidFilterError",
    "Degree",
    "Subject",
    "Room",
    "User",
    "WeeklySlot",
    "MonthlyPlanEntry",
]
