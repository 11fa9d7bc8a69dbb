"""Degrees and subjects API endpoints (read-only reference data)."""

from fastapi import APIRouter, Depends, Query

from schoolplan.schemas.catalog import DegreeResponse, SubjectResponse
from schoolplan.services.catalog_service import DegreeService, SubjectService
from schoolplan.utils.dependencies import dependencies

router = APIRouter(tags=["Catalog"])


@router.get("/degrees")
async def list_degrees(
    service: DegreeService = Depends(dependencies.degree),
) -> list[DegreeResponse]:
    """List the canonical degrees in display order."""
    degrees = await service.list_canonical()
    return [DegreeResponse.model_validate(d) for d in degrees]


@router.get("/subjects")
async def search_subjects(
    search: str = Query(default="", description="Search term for subject name or code"),
    limit: int = Query(default=50, ge=1, le=200, description="Max results"),
    service: SubjectService = Depends(dependencies.subject),
) -> list[SubjectResponse]:
    """Search subjects by name or code.

    Args:
        search: Search term (case-insensitive); empty lists all subjects.
        limit: Maximum number of results to return.
        service: SubjectService instance.

    Returns:
        List of matching subjects ordered by name.
    """
    subjects = await service.search(search, limit=limit)
    return [SubjectResponse.model_validate(s) for s in subjects]
