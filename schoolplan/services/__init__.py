"""Business logic services package."""

from schoolplan.services.alias_resolver import DegreeResolver
from schoolplan.services.base import BaseService
from schoolplan.services.catalog_service import DegreeService, SubjectService
from schoolplan.services.monthly_plan_service import MonthlyPlanService
from schoolplan.services.planning_view_service import PlanningViewService
from schoolplan.services.weekly_slot_service import WeeklySlotService

__all__ = [
    "BaseService",
    "DegreeResolver",
    "DegreeService",
    "SubjectService",
    "WeeklySlotService",
    "MonthlyPlanService",
    "PlanningViewService",
]
