"""Monthly plans API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi import status as http_status

from schoolplan.config import settings
from schoolplan.schemas.common import Envelope, Page, PaginationMeta
from schoolplan.schemas.monthly_plan import (
    MonthlyPlanResponse,
    MonthlyPlanUpdate,
    MonthlyPlanUpsert,
)
from schoolplan.services.monthly_plan_service import MonthlyPlanService
from schoolplan.utils.api_helpers import paginate
from schoolplan.utils.dependencies import dependencies

router = APIRouter(
    prefix="/monthly-plans",
    tags=["Monthly Plans"],
)


@router.get("")
async def list_monthly_plans(
    month: Optional[str] = Query(None, description="Calendar month, YYYY-MM"),
    degree_id: Optional[str] = Query(None, description="Degree id, slug or alias"),
    teacher_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    service: MonthlyPlanService = Depends(dependencies.monthly_plan),
) -> Page[MonthlyPlanResponse]:
    """List plan entries, optionally for one month.

    Args:
        month: Restrict to entries dated in this month.
        degree_id: Filter by degree (id, slug or alias).
        teacher_id: Filter by teacher ID.
        subject_id: Filter by subject ID.
        page: Page number (1-indexed).
        per_page: Page size, defaults to DEFAULT_MONTHLY_PLAN_PAGE_SIZE.
        service: MonthlyPlanService instance.

    Returns:
        One page of entries ordered by date, subject and sequence.

    Raises:
        FieldValidationError: If month is malformed or degree_id is unknown.
    """
    resolved_degree = None
    if degree_id is not None:
        resolved_degree = await service.resolver.require_degree(degree_id)

    entries = await service.list_month(
        month=month,
        degree_id=resolved_degree,
        teacher_id=teacher_id,
        subject_id=subject_id,
    )
    items, meta = paginate(
        entries, page, per_page or settings.DEFAULT_MONTHLY_PLAN_PAGE_SIZE
    )
    return Page[MonthlyPlanResponse](
        data=[MonthlyPlanResponse.model_validate(entry) for entry in items],
        meta=PaginationMeta(**meta),
    )


@router.post("", status_code=http_status.HTTP_200_OK)
async def upsert_monthly_plan(
    data: MonthlyPlanUpsert,
    service: MonthlyPlanService = Depends(dependencies.monthly_plan),
) -> Envelope[MonthlyPlanResponse]:
    """Create a plan entry, or update the one holding the same key.

    Raises:
        FieldValidationError: If a field or reference is invalid.
        DuplicateRecordError: If the key stayed contended; the call may be retried.
    """
    entry = await service.upsert(**data.model_dump())
    return Envelope[MonthlyPlanResponse](data=MonthlyPlanResponse.model_validate(entry))


@router.get("/{entry_id}")
async def get_monthly_plan(
    entry_id: int,
    service: MonthlyPlanService = Depends(dependencies.monthly_plan),
) -> Envelope[MonthlyPlanResponse]:
    """Get a plan entry with its degree, subject and teacher."""
    entry = await service.get_entry(entry_id)
    return Envelope[MonthlyPlanResponse](data=MonthlyPlanResponse.model_validate(entry))


@router.patch("/{entry_id}")
async def update_monthly_plan(
    entry_id: int,
    data: MonthlyPlanUpdate,
    service: MonthlyPlanService = Depends(dependencies.monthly_plan),
) -> Envelope[MonthlyPlanResponse]:
    """Patch a plan entry directly.

    Raises:
        RecordNotFoundError: If entry with given ID does not exist.
        DuplicateRecordError: If the new key fields belong to another entry.
    """
    entry = await service.update_entry(entry_id, **data.model_dump(exclude_unset=True))
    return Envelope[MonthlyPlanResponse](data=MonthlyPlanResponse.model_validate(entry))


@router.delete("/{entry_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_monthly_plan(
    entry_id: int,
    service: MonthlyPlanService = Depends(dependencies.monthly_plan),
) -> None:
    """Delete a plan entry."""
    await service.delete(entry_id)
