"""Degree resolver: turns ids, slugs and localized labels into degree ids.

The alias tables are static (see ``schoolplan.utils.aliases``); this service
adds the single database lookup needed to confirm a numeric id or to turn a
matched slug into the id of its canonical row.
"""

import logging
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolplan.exceptions import DatabaseConnectionError, FieldValidationError
from schoolplan.models.degree import Degree
from schoolplan.utils.aliases import DEFAULT_DEGREE_ALIASES, DegreeAliasTable

logger = logging.getLogger(__name__)

DegreeInput = Union[int, str, None]


class DegreeResolver:
    """Resolve user-supplied degree identifiers to canonical degree ids.

    Usage:
        resolver = DegreeResolver(db_session)
        degree_id = await resolver.resolve_degree("2ème année collège")

    Attributes:
        db: Database session for the existence lookup
        table: Immutable alias table, injected for tests and other installs
    """

    def __init__(
        self, db: AsyncSession, table: DegreeAliasTable = DEFAULT_DEGREE_ALIASES
    ) -> None:
        self.db = db
        self.table = table

    async def resolve_degree(self, value: DegreeInput) -> Optional[int]:
        """Resolve a degree id, slug or alias.

        Numeric input is treated as an id and only accepted when it belongs
        to a canonical degree. Anything else is normalised and matched
        against the alias table.

        Returns:
            Canonical degree id, or None when nothing matches.

        Raises:
            DatabaseConnectionError: If database operation fails
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, int):
            return await self._canonical_id(Degree.id == value)

        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            return await self._canonical_id(Degree.id == int(text))

        slug = self.table.match(text)
        if slug is None:
            logger.debug("Unknown degree alias", extra={"value": text})
            return None
        return await self._canonical_id(Degree.slug == slug)

    async def require_degree(self, value: DegreeInput, field: str = "degree_id") -> int:
        """Resolve a degree or raise a field-level validation error."""
        degree_id = await self.resolve_degree(value)
        if degree_id is None:
            raise FieldValidationError.for_field(
                field, f"Unknown degree: {value!r}"
            )
        return degree_id

    async def _canonical_id(self, condition) -> Optional[int]:
        try:
            result = await self.db.execute(
                select(Degree.id).where(condition, Degree.slug.is_not(None))
            )
            return result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                "Failed to resolve degree",
                extra={"error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during degree lookup: {str(e)}"
            ) from e
