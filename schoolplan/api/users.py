"""Per-user planning views."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from schoolplan.schemas.common import Envelope
from schoolplan.schemas.monthly_plan import MonthlyPlanResponse
from schoolplan.schemas.weekly_slot import WeeklySlotResponse
from schoolplan.services.planning_view_service import PlanningViewService
from schoolplan.utils.dependencies import dependencies

router = APIRouter(
    prefix="/users",
    tags=["Planning views"],
)


@router.get("/{user_id}/timetable")
async def get_user_timetable(
    user_id: int,
    child_id: Optional[int] = Query(None, description="Child to view, for parents"),
    degree_id: Optional[str] = Query(None, description="Narrow a teacher's view"),
    service: PlanningViewService = Depends(dependencies.planning_view),
) -> Envelope[list[WeeklySlotResponse]]:
    """Weekly timetable as seen by a student, teacher or parent.

    Raises:
        RecordNotFoundError: If the user (or child) does not exist.
        FieldValidationError: If the role has no timetable view or lacks a degree.
    """
    slots = await service.timetable(user_id, child_id=child_id, degree_id=degree_id)
    return Envelope[list[WeeklySlotResponse]](
        data=[WeeklySlotResponse.model_validate(slot) for slot in slots]
    )


@router.get("/{user_id}/monthly-plans")
async def get_user_monthly_plans(
    user_id: int,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to this month"),
    child_id: Optional[int] = Query(None, description="Child to view, for parents"),
    degree_id: Optional[str] = Query(None, description="Narrow a teacher's view"),
    service: PlanningViewService = Depends(dependencies.planning_view),
) -> Envelope[list[MonthlyPlanResponse]]:
    """Monthly plan as seen by a student, teacher or parent."""
    entries = await service.monthly_plans(
        user_id, month=month, child_id=child_id, degree_id=degree_id
    )
    return Envelope[list[MonthlyPlanResponse]](
        data=[MonthlyPlanResponse.model_validate(entry) for entry in entries]
    )
