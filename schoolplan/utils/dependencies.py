"""Dependency injection functions for FastAPI routes.

Uses descriptor pattern to automatically create dependency functions
for all services, eliminating code duplication.
"""

from typing import Any, Type, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolplan.services.catalog_service import DegreeService, SubjectService
from schoolplan.services.monthly_plan_service import MonthlyPlanService
from schoolplan.services.planning_view_service import PlanningViewService
from schoolplan.services.weekly_slot_service import WeeklySlotService
from schoolplan.utils.db import get_db_session

T = TypeVar("T")


class ServiceDependency:
    """Descriptor that creates a dependency injection function for a service.

    Caches the dependency function so the same function object is returned
    on every access, which keeps FastAPI's dependency_overrides usable.
    """

    def __init__(self, service_class: Type[T]) -> None:
        self.service_class = service_class
        self._cached_func: Any = None

    def __get__(self, instance: Any, owner: type) -> Any:
        """Create and return cached dependency function when accessed."""
        if self._cached_func is None:

            def dependency_func(
                db: AsyncSession = Depends(get_db_session),
            ) -> T:
                """Get service instance bound to the request session."""
                return self.service_class(db)

            self._cached_func = dependency_func
        return self._cached_func


class ServiceDependencies:
    """Container for all service dependency injection functions."""

    degree = ServiceDependency(DegreeService)
    subject = ServiceDependency(SubjectService)
    weekly_slot = ServiceDependency(WeeklySlotService)
    monthly_plan = ServiceDependency(MonthlyPlanService)
    planning_view = ServiceDependency(PlanningViewService)


# Create singleton instance for easy access
dependencies = ServiceDependencies()
