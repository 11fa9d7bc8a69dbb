"""Pydantic schemas for API request/response models."""

from schoolplan.schemas.catalog import DegreeResponse, SubjectResponse
from schoolplan.schemas.common import Envelope, Page, PaginationMeta
from schoolplan.schemas.monthly_plan import (
    MonthlyPlanResponse,
    MonthlyPlanUpdate,
    MonthlyPlanUpsert,
)
from schoolplan.schemas.weekly_slot import (
    SlotConflictResponse,
    WeeklySlotCreate,
    WeeklySlotResponse,
    WeeklySlotUpdate,
)

__all__ = [
    "Envelope",
    "Page",
    "PaginationMeta",
    "DegreeResponse",
    "SubjectResponse",
    "WeeklySlotCreate",
    "WeeklySlotUpdate",
    "WeeklySlotResponse",
    "SlotConflictResponse",
    "MonthlyPlanUpsert",
    "MonthlyPlanUpdate",
    "MonthlyPlanResponse",
]
