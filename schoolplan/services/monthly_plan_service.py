"""Monthly plan service: upsert engine for dated curriculum entries.

An upsert either inserts a new entry or updates the entry holding the exact
natural key (plan_date, degree, subject, teacher, sequence). The unique
constraint ``msp_uniq`` decides races: every attempt computes the target key
and writes inside one transaction, and a uniqueness violation rolls that
transaction back and starts the attempt over. A computed sequence is only
ever inserted, never used to update, so a lost race never overwrites another
caller's entry.

On PostgreSQL every attempt first takes a transaction-scoped advisory lock
on the key without its sequence, so writers of one key queue up instead of
racing; the constraint and retry loop remain as the backstop for writers
that bypass the lock and for other backends.
"""

import calendar
import hashlib
import logging
import re
from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolplan.config import settings
from schoolplan.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    FieldValidationError,
    InvalidFilterError,
    RecordNotFoundError,
)
from schoolplan.models.monthly_plan import NATURAL_KEY_FIELDS, MonthlyPlanEntry
from schoolplan.models.subject import Subject
from schoolplan.models.user import User
from schoolplan.services.alias_resolver import DegreeResolver
from schoolplan.services.base import BaseService

logger = logging.getLogger(__name__)

ENTRY_FIELDS = NATURAL_KEY_FIELDS + ("title", "notes")

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month.

    Raises:
        FieldValidationError: If the string is not a valid month
    """
    match = _MONTH_RE.match(month.strip()) if isinstance(month, str) else None
    if match is None or not 1 <= int(match.group(2)) <= 12:
        raise FieldValidationError.for_field("month", "month must use the YYYY-MM format")
    year, month_number = int(match.group(1)), int(match.group(2))
    last_day = calendar.monthrange(year, month_number)[1]
    return date(year, month_number, 1), date(year, month_number, last_day)


def advisory_lock_id(key: dict[str, Any]) -> int:
    """Signed 64-bit lock id shared by every writer of one key, sequence excluded."""
    raw = "|".join(
        str(part)
        for part in (
            key["plan_date"].isoformat(),
            key["degree_id"],
            key["subject_id"],
            key["teacher_id"] or 0,
        )
    )
    digest = hashlib.blake2b(raw.encode(), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


def advisory_lock_statement(key: dict[str, Any]):
    return select(func.pg_advisory_xact_lock(advisory_lock_id(key)))


def _parse_plan_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise FieldValidationError.for_field("plan_date", "plan_date must be a YYYY-MM-DD date")


class MonthlyPlanService(BaseService[MonthlyPlanEntry]):
    """Service for monthly curriculum plan entries.

    Provides, on top of BaseService:
    - upsert(...): Create or update by natural key, safe under concurrency
    - update_entry(id, **patch): Direct patch, Conflict on key collision
    - delete(id): Hard delete (inherited)
    - get_entry(id): Entry with degree/subject/teacher attached
    - list_month(month, ...): Entries of one calendar month

    Usage:
        service = MonthlyPlanService(db_session)
        entry = await service.upsert(
            plan_date=date(2025, 9, 10), degree_id=1, subject_id=2
        )

    Attributes:
        model: MonthlyPlanEntry model class
        db: Database session for operations
        resolver: Degree alias resolver
        sequence_enabled: Whether the sequence column discriminates entries
        max_attempts: Attempts before a persistent key conflict is reported
    """

    model = MonthlyPlanEntry

    def __init__(
        self,
        db: AsyncSession,
        resolver: Optional[DegreeResolver] = None,
        sequence_enabled: Optional[bool] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        super().__init__(db)
        self.resolver = resolver or DegreeResolver(db)
        self.sequence_enabled = (
            settings.SEQUENCE_DISCRIMINATOR_ENABLED
            if sequence_enabled is None
            else sequence_enabled
        )
        self.max_attempts = max(
            1, max_attempts if max_attempts is not None else settings.UPSERT_MAX_ATTEMPTS
        )

    async def upsert(
        self,
        *,
        plan_date: Any,
        degree_id: Any,
        subject_id: int,
        teacher_id: Optional[int] = None,
        title: Optional[str] = None,
        notes: Optional[str] = None,
        sequence: Optional[int] = None,
    ) -> MonthlyPlanEntry:
        """Create an entry or update the one holding the same key.

        Without the sequence discriminator the key is (plan_date, degree,
        subject, teacher) and a caller-supplied sequence is ignored. With it,
        an omitted sequence always creates a new entry numbered one past the
        highest existing one, and an explicit sequence targets that exact key.

        Args:
            plan_date: Date or ISO date string
            degree_id: Degree id, slug or alias
            subject_id: Subject id
            teacher_id: Optional teacher (user) id
            title: Optional title, written on insert and update
            notes: Optional notes, written on insert and update
            sequence: Optional explicit sequence

        Returns:
            The written entry with its relations attached

        Raises:
            FieldValidationError: If a field or reference is invalid
            DuplicateRecordError: If the key stayed contended for every attempt
            DatabaseConnectionError: If database operation fails
        """
        key = await self._validated_key(
            plan_date=plan_date,
            degree_id=degree_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            sequence=sequence,
        )
        explicit_sequence = key["sequence"]

        last_error: Optional[IntegrityError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                entry_id, created = await self._write_once(
                    key, explicit_sequence, title, notes
                )
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                last_error = e
                logger.warning(
                    "Monthly plan key taken, retrying",
                    extra={"attempt": attempt, "key": _loggable(key)},
                )
                continue
            except (DBAPIError, SQLAlchemyError) as e:
                await self.db.rollback()
                logger.error(
                    "Failed to upsert MonthlyPlanEntry",
                    extra={"key": _loggable(key), "error": str(e)},
                    exc_info=True,
                )
                raise DatabaseConnectionError(
                    f"Database error during upsert: {str(e)}"
                ) from e

            logger.debug(
                "Created MonthlyPlanEntry" if created else "Updated MonthlyPlanEntry",
                extra={"model": self.model.__name__, "id": entry_id, "attempt": attempt},
            )
            return await self.get_entry(entry_id)

        logger.warning(
            "Monthly plan upsert gave up",
            extra={"attempts": self.max_attempts, "key": _loggable(key)},
        )
        raise DuplicateRecordError(
            self.model.__name__,
            key=key,
            detail=(
                f"MonthlyPlanEntry key still contended after "
                f"{self.max_attempts} attempts, retry the request"
            ),
        ) from last_error

    async def update_entry(self, entry_id: int, **patch: Any) -> MonthlyPlanEntry:
        """Patch an entry directly.

        Moving the entry onto a key held by another entry is refused; the
        stored entry is left untouched.

        Raises:
            RecordNotFoundError: If entry not found
            InvalidFilterError: If the patch names an unknown field
            FieldValidationError: If a field or reference is invalid
            DuplicateRecordError: If the new key belongs to another entry
            DatabaseConnectionError: If database operation fails
        """
        for field in patch:
            if field not in ENTRY_FIELDS:
                raise InvalidFilterError(
                    f"Invalid attribute '{field}' for model {self.model.__name__}"
                )
        if not self.sequence_enabled:
            patch.pop("sequence", None)
        elif "sequence" in patch and patch["sequence"] is None:
            raise FieldValidationError.for_field(
                "sequence", "sequence cannot be null; omit it to keep the current one"
            )

        entry = await self.get_by_id_or_fail(entry_id)
        current = entry.natural_key()
        merged = {**current, **{k: v for k, v in patch.items() if k in NATURAL_KEY_FIELDS}}

        key = current
        changes: dict[str, Any] = {}
        if merged != current:
            key = await self._validated_key(
                plan_date=merged["plan_date"],
                degree_id=merged["degree_id"],
                subject_id=merged["subject_id"],
                teacher_id=merged["teacher_id"],
                sequence=merged["sequence"],
                resolve_degree="degree_id" in patch,
            )
            if key != current:
                await self._lock_key(key)
                holder = await self._find_by_key(key)
                if holder is not None and holder.id != entry_id:
                    raise DuplicateRecordError(self.model.__name__, key=key)
            changes.update(key)
        for field in ("title", "notes"):
            if field in patch:
                changes[field] = patch[field]

        try:
            for field, value in changes.items():
                setattr(entry, field, value)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Monthly plan patch collides with another entry",
                extra={"id": entry_id, "key": _loggable(key)},
            )
            raise DuplicateRecordError(self.model.__name__, key=key) from e
        except (DBAPIError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(
                "Failed to update MonthlyPlanEntry",
                extra={"id": entry_id, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during update: {str(e)}"
            ) from e

        logger.debug(
            "Updated MonthlyPlanEntry",
            extra={"model": self.model.__name__, "id": entry_id},
        )
        return await self.get_entry(entry_id)

    async def get_entry(self, entry_id: int) -> MonthlyPlanEntry:
        """Get an entry with its relations attached.

        Raises:
            RecordNotFoundError: If entry not found
        """
        try:
            result = await self.db.execute(
                self._hydrated().where(MonthlyPlanEntry.id == entry_id)
            )
            entry = result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            raise DatabaseConnectionError(f"Database error during get: {str(e)}") from e
        if entry is None:
            raise RecordNotFoundError(self.model.__name__, entry_id)
        return entry

    async def list_month(
        self,
        month: Optional[str] = None,
        degree_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> List[MonthlyPlanEntry]:
        """List entries, optionally restricted to one ``YYYY-MM`` month.

        Ordered by plan date, subject, sequence and id.

        Raises:
            FieldValidationError: If month is malformed
            DatabaseConnectionError: If database operation fails
        """
        query = self._hydrated()
        if month is not None:
            first_day, last_day = month_bounds(month)
            query = query.where(MonthlyPlanEntry.plan_date.between(first_day, last_day))
        if degree_id is not None:
            query = query.where(MonthlyPlanEntry.degree_id == degree_id)
        if teacher_id is not None:
            query = query.where(MonthlyPlanEntry.teacher_id == teacher_id)
        if subject_id is not None:
            query = query.where(MonthlyPlanEntry.subject_id == subject_id)
        query = query.order_by(
            MonthlyPlanEntry.plan_date,
            MonthlyPlanEntry.subject_id,
            MonthlyPlanEntry.sequence,
            MonthlyPlanEntry.id,
        )

        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                "Failed to list MonthlyPlanEntry",
                extra={"month": month, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during list: {str(e)}"
            ) from e

    async def _validated_key(
        self,
        *,
        plan_date: Any,
        degree_id: Any,
        subject_id: Any,
        teacher_id: Any,
        sequence: Any,
        resolve_degree: bool = True,
    ) -> dict[str, Any]:
        """Check every key field and return the normalised key.

        ``sequence`` comes back as None when it must be computed.
        """
        plan_day = _parse_plan_date(plan_date)

        if not self.sequence_enabled:
            sequence = 1
        elif sequence is not None and (
            isinstance(sequence, bool) or not isinstance(sequence, int) or sequence < 1
        ):
            raise FieldValidationError.for_field(
                "sequence", "sequence must be a positive integer"
            )

        if resolve_degree:
            degree_id = await self.resolver.require_degree(degree_id)
        subject = await self.require_related(Subject, "subject_id", subject_id)
        if teacher_id is not None:
            await self.require_related(User, "teacher_id", teacher_id)

        return {
            "plan_date": plan_day,
            "degree_id": degree_id,
            "subject_id": subject.id,
            "teacher_id": teacher_id,
            "sequence": sequence,
        }

    async def _write_once(
        self,
        key: dict[str, Any],
        sequence: Optional[int],
        title: Optional[str],
        notes: Optional[str],
    ) -> Tuple[int, bool]:
        """One upsert attempt inside the current transaction.

        Returns:
            (entry id, whether a new entry was inserted)
        """
        await self._lock_key(key)
        if sequence is None:
            target = {**key, "sequence": await self._next_sequence(key)}
        else:
            target = {**key, "sequence": sequence}
            existing = await self._find_by_key(target)
            if existing is not None:
                existing.title = title
                existing.notes = notes
                existing.updated_at = func.now()
                await self.db.flush()
                return existing.id, False

        entry = MonthlyPlanEntry(**target, title=title, notes=notes)
        self.db.add(entry)
        await self.db.flush()
        return entry.id, True

    async def _lock_key(self, key: dict[str, Any]) -> None:
        """Hold the per-key advisory lock until the transaction ends (PostgreSQL)."""
        if self.db.get_bind().dialect.name != "postgresql":
            return
        await self.db.execute(advisory_lock_statement(key))

    async def _next_sequence(self, key: dict[str, Any]) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.max(MonthlyPlanEntry.sequence), 0)).where(
                *self._key_conditions(key, with_sequence=False)
            )
        )
        return int(result.scalar_one()) + 1

    async def _find_by_key(self, key: dict[str, Any]) -> Optional[MonthlyPlanEntry]:
        result = await self.db.execute(
            select(MonthlyPlanEntry).where(*self._key_conditions(key))
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _key_conditions(key: dict[str, Any], with_sequence: bool = True) -> list:
        conditions = [
            MonthlyPlanEntry.plan_date == key["plan_date"],
            MonthlyPlanEntry.degree_id == key["degree_id"],
            MonthlyPlanEntry.subject_id == key["subject_id"],
            MonthlyPlanEntry.teacher_key == (key["teacher_id"] or 0),
        ]
        if with_sequence:
            conditions.append(MonthlyPlanEntry.sequence == key["sequence"])
        return conditions

    def _hydrated(self):
        return (
            select(MonthlyPlanEntry)
            .options(
                selectinload(MonthlyPlanEntry.degree),
                selectinload(MonthlyPlanEntry.subject),
                selectinload(MonthlyPlanEntry.teacher),
            )
            .execution_options(populate_existing=True)
        )


def _loggable(key: dict[str, Any]) -> dict[str, Any]:
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in key.items()}
