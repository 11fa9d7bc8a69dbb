"""Timetables (weekly slots) API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi import status as http_status

from schoolplan.config import settings
from schoolplan.schemas.common import Envelope, Page, PaginationMeta
from schoolplan.schemas.weekly_slot import (
    SlotConflictResponse,
    WeeklySlotCreate,
    WeeklySlotResponse,
    WeeklySlotUpdate,
)
from schoolplan.services.weekly_slot_service import WeeklySlotService
from schoolplan.utils.api_helpers import paginate
from schoolplan.utils.dependencies import dependencies

router = APIRouter(
    prefix="/timetables",
    tags=["Timetables"],
)


@router.get("")
async def list_timetables(
    degree_id: Optional[str] = Query(None, description="Degree id, slug or alias"),
    teacher_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    room_id: Optional[int] = None,
    day_of_week: Optional[int] = Query(None, ge=1, le=7),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> Page[WeeklySlotResponse]:
    """List weekly slots in weekly-grid order.

    Args:
        degree_id: Filter by degree (id, slug or alias).
        teacher_id: Filter by teacher ID.
        subject_id: Filter by subject ID.
        room_id: Filter by room ID.
        day_of_week: Filter by day (1 = Monday).
        page: Page number (1-indexed).
        per_page: Page size, defaults to DEFAULT_TIMETABLE_PAGE_SIZE.
        service: WeeklySlotService instance.

    Returns:
        One page of slots ordered by degree, day and time of day.

    Raises:
        FieldValidationError: If degree_id matches no degree.
    """
    resolved_degree = None
    if degree_id is not None:
        resolved_degree = await service.resolver.require_degree(degree_id)

    slots = await service.list_ordered(
        degree_id=resolved_degree,
        teacher_id=teacher_id,
        subject_id=subject_id,
        room_id=room_id,
        day_of_week=day_of_week,
    )
    items, meta = paginate(slots, page, per_page or settings.DEFAULT_TIMETABLE_PAGE_SIZE)
    return Page[WeeklySlotResponse](
        data=[WeeklySlotResponse.model_validate(slot) for slot in items],
        meta=PaginationMeta(**meta),
    )


@router.get("/conflicts")
async def list_conflicts(
    degree_id: Optional[str] = Query(None, description="Degree id, slug or alias"),
    teacher_id: Optional[int] = None,
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> Envelope[list[SlotConflictResponse]]:
    """Report overlapping slots sharing a degree, teacher or room.

    Informational only: slots are never rejected for overlapping.
    """
    resolved_degree = None
    if degree_id is not None:
        resolved_degree = await service.resolver.require_degree(degree_id)

    conflicts = await service.find_conflicts(
        degree_id=resolved_degree, teacher_id=teacher_id
    )
    return Envelope[list[SlotConflictResponse]](
        data=[SlotConflictResponse.model_validate(c) for c in conflicts]
    )


@router.post("", status_code=http_status.HTTP_201_CREATED)
async def create_timetable(
    data: WeeklySlotCreate,
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> Envelope[WeeklySlotResponse]:
    """Create a weekly slot.

    Raises:
        FieldValidationError: If the time expression, day or degree is invalid.
        RelatedRecordNotFoundError: If subject, teacher or room does not exist.
    """
    slot = await service.create_slot(**data.model_dump())
    return Envelope[WeeklySlotResponse](data=WeeklySlotResponse.model_validate(slot))


@router.get("/{slot_id}")
async def get_timetable(
    slot_id: int,
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> Envelope[WeeklySlotResponse]:
    """Get a weekly slot with its degree, subject, teacher and room.

    Raises:
        RecordNotFoundError: If slot with given ID does not exist.
    """
    slot = await service.get_slot(slot_id)
    return Envelope[WeeklySlotResponse](data=WeeklySlotResponse.model_validate(slot))


@router.api_route("/{slot_id}", methods=["PUT", "PATCH"])
async def update_timetable(
    slot_id: int,
    data: WeeklySlotUpdate,
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> Envelope[WeeklySlotResponse]:
    """Apply a partial update to a weekly slot.

    Raises:
        RecordNotFoundError: If slot with given ID does not exist.
        FieldValidationError: If the updated slot would be invalid.
    """
    slot = await service.update_slot(slot_id, **data.model_dump(exclude_unset=True))
    return Envelope[WeeklySlotResponse](data=WeeklySlotResponse.model_validate(slot))


@router.delete("/{slot_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_timetable(
    slot_id: int,
    service: WeeklySlotService = Depends(dependencies.weekly_slot),
) -> None:
    """Delete a weekly slot."""
    await service.delete(slot_id)
