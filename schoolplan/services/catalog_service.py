"""Read-only catalog services for degrees and subjects.

Degrees and subjects are reference data owned elsewhere; these services only
expose them for pickers and filters.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from schoolplan.exceptions import DatabaseConnectionError
from schoolplan.models.degree import Degree
from schoolplan.models.subject import Subject
from schoolplan.services.base import BaseService

logger = logging.getLogger(__name__)


class DegreeService(BaseService[Degree]):
    """Service for Degree reference data.

    - list_canonical(): The canonical degrees in display order

    Legacy rows (no slug) are never returned.
    """

    model = Degree

    async def list_canonical(self) -> List[Degree]:
        """Get canonical degrees ordered by position.

        Raises:
            DatabaseConnectionError: If database operation fails.
        """
        try:
            stmt = (
                select(Degree)
                .where(Degree.slug.is_not(None))
                .order_by(Degree.position, Degree.id)
            )
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                "Failed to list canonical degrees",
                extra={"error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during list_canonical: {str(e)}"
            ) from e


class SubjectService(BaseService[Subject]):
    """Service for Subject reference data.

    Usage:
        service = SubjectService(db_session)
        subjects = await service.search("math", limit=10)

    Attributes:
        model: Subject model class
        db: Database session for operations
    """

    model = Subject

    async def search(self, term: Optional[str] = None, limit: int = 50) -> List[Subject]:
        """Search subjects by name or code, case-insensitively.

        Args:
            term: Substring to look for; None or blank lists every subject
            limit: Maximum number of subjects returned

        Returns:
            Matching subjects ordered by name.

        Raises:
            DatabaseConnectionError: If database operation fails.
        """
        stmt = select(Subject).order_by(Subject.name).limit(limit)
        if term and term.strip():
            pattern = f"%{term.strip()}%"
            stmt = stmt.where(
                or_(Subject.name.ilike(pattern), Subject.code.ilike(pattern))
            )
        try:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                "Failed to search subjects",
                extra={"term": term, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during search: {str(e)}"
            ) from e
