"""Per-user planning views.

A student sees the timetable and monthly plan of their degree, a teacher
sees what they teach, and a parent sees what one of their children sees.
The user's stored role goes through the role resolver, so legacy values such
as "élève" or "enseignant" select the right view.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolplan.exceptions import FieldValidationError, RecordNotFoundError
from schoolplan.models.monthly_plan import MonthlyPlanEntry
from schoolplan.models.user import User
from schoolplan.models.weekly_slot import WeeklySlot
from schoolplan.services.base import BaseService
from schoolplan.services.monthly_plan_service import MonthlyPlanService
from schoolplan.services.weekly_slot_service import WeeklySlotService
from schoolplan.utils.aliases import Role, resolve_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanningScope:
    """Filters a user's view applies to timetables and plans."""

    role: Role
    degree_id: Optional[int] = None
    teacher_id: Optional[int] = None


class PlanningViewService(BaseService[User]):
    """Service resolving what planning data a given user sees.

    Usage:
        service = PlanningViewService(db_session)
        slots = await service.timetable(user_id=12)
        plans = await service.monthly_plans(user_id=7, month="2025-09", child_id=12)

    Attributes:
        model: User model class
        db: Database session for operations
        slots: Weekly slot service used for timetable listings
        plans: Monthly plan service used for plan listings
    """

    model = User

    def __init__(
        self,
        db: AsyncSession,
        slots: Optional[WeeklySlotService] = None,
        plans: Optional[MonthlyPlanService] = None,
    ) -> None:
        super().__init__(db)
        self.slots = slots or WeeklySlotService(db)
        self.plans = plans or MonthlyPlanService(db)

    async def scope_for(
        self,
        user_id: int,
        child_id: Optional[int] = None,
        degree_id: Any = None,
    ) -> PlanningScope:
        """Work out the filters of a user's view.

        Args:
            user_id: Viewing user
            child_id: Child to look at, required for parents
            degree_id: Optional degree narrowing a teacher's view

        Raises:
            RecordNotFoundError: If the user does not exist
            FieldValidationError: If the role has no view or required data
                (a degree, a child) is missing
        """
        user = await self.get_by_id_or_fail(user_id)
        role = resolve_role(user.role)

        if role == Role.STUDENT:
            if user.degree_id is None:
                raise FieldValidationError.for_field(
                    "degree_id", "Student has no degree assigned"
                )
            return PlanningScope(Role.STUDENT, degree_id=user.degree_id)

        if role == Role.TEACHER:
            narrowed = None
            if degree_id is not None:
                narrowed = await self.slots.resolver.require_degree(degree_id)
            return PlanningScope(Role.TEACHER, degree_id=narrowed, teacher_id=user.id)

        if role == Role.PARENT:
            child = await self._child_of(user, child_id)
            if child.degree_id is None:
                raise FieldValidationError.for_field(
                    "child_id", "Child has no degree assigned"
                )
            return PlanningScope(Role.PARENT, degree_id=child.degree_id)

        logger.info(
            "No planning view for role",
            extra={"user_id": user_id, "role": role},
        )
        raise FieldValidationError.for_field(
            "role", f"No planning view for role {role!r}"
        )

    async def timetable(
        self, user_id: int, child_id: Optional[int] = None, degree_id: Any = None
    ) -> List[WeeklySlot]:
        """Weekly slots visible to a user, in weekly-grid order."""
        scope = await self.scope_for(user_id, child_id=child_id, degree_id=degree_id)
        return await self.slots.list_ordered(
            degree_id=scope.degree_id, teacher_id=scope.teacher_id
        )

    async def monthly_plans(
        self,
        user_id: int,
        month: Optional[str] = None,
        child_id: Optional[int] = None,
        degree_id: Any = None,
    ) -> List[MonthlyPlanEntry]:
        """Monthly plan entries visible to a user; month defaults to the current one."""
        scope = await self.scope_for(user_id, child_id=child_id, degree_id=degree_id)
        return await self.plans.list_month(
            month=month or date.today().strftime("%Y-%m"),
            degree_id=scope.degree_id,
            teacher_id=scope.teacher_id,
        )

    async def _child_of(self, parent: User, child_id: Optional[int]) -> User:
        if child_id is None:
            raise FieldValidationError.for_field(
                "child_id", "child_id is required for parents"
            )
        child = await self.get_by_id(child_id)
        if child is None:
            raise RecordNotFoundError(self.model.__name__, child_id)
        if child.parent_id != parent.id:
            raise FieldValidationError.for_field(
                "child_id", f"User {child_id} is not a child of user {parent.id}"
            )
        return child
