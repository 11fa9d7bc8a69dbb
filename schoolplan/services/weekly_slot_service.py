"""Weekly slot service: CRUD and canonical ordering of timetable lessons.

Every write goes through the same preparation step: the degree reference is
resolved (ids, slugs and aliases are accepted), subject/teacher/room ids are
checked for existence, the time expression is validated and the display
title is derived when none was supplied. Nothing is written until all of it
has passed.

Listings are ordered at read time by degree, day of week and the time-of-day
key from ``schoolplan.utils.time_expression``.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from schoolplan.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    FieldValidationError,
    InvalidFilterError,
    RecordNotFoundError,
)
from schoolplan.models.room import Room
from schoolplan.models.subject import Subject
from schoolplan.models.user import User
from schoolplan.models.weekly_slot import WeeklySlot
from schoolplan.services.alias_resolver import DegreeResolver
from schoolplan.services.base import BaseService
from schoolplan.utils.time_expression import (
    CanonicalTime,
    format_clock,
    minutes_overlap,
    slot_range,
    sort_key,
    validate_time_expression,
)

logger = logging.getLogger(__name__)

DAY_ABBREVIATIONS = {
    1: "Lun",
    2: "Mar",
    3: "Mer",
    4: "Jeu",
    5: "Ven",
    6: "Sam",
    7: "Dim",
}

SLOT_FIELDS = (
    "degree_id",
    "subject_id",
    "teacher_id",
    "room_id",
    "day_of_week",
    "period",
    "start_time",
    "end_time",
    "title",
)

FILTER_FIELDS = ("degree_id", "teacher_id", "subject_id", "room_id", "day_of_week")

TITLE_MAX_LENGTH = 255


def compose_title(
    subject_name: Optional[str],
    teacher_name: Optional[str],
    day_of_week: Optional[int],
    when: CanonicalTime,
) -> str:
    """Build the display title of a lesson.

    Example: ``"Mathematique — Lun 08:00–09:00 — Amina Idrissi"``.
    """
    day = DAY_ABBREVIATIONS.get(day_of_week, "Jour")
    if when.has_explicit_time:
        moment = f"{day} {format_clock(when.start_time)}–{format_clock(when.end_time)}"
    elif when.period:
        moment = f"{day} • Période {when.period}"
    else:
        moment = day

    pieces = [subject_name or "Cours", moment]
    if teacher_name:
        pieces.append(teacher_name)
    return " — ".join(pieces)[:TITLE_MAX_LENGTH]


def weekly_order(slot: WeeklySlot) -> tuple:
    """Full listing order: degree, day of week, then time of day."""
    return (slot.degree_id, slot.day_of_week, sort_key(slot), slot.id)


@dataclass(frozen=True)
class SlotConflict:
    """Two lessons overlapping in time on the same day."""

    first: WeeklySlot
    second: WeeklySlot
    reasons: tuple[str, ...]


class WeeklySlotService(BaseService[WeeklySlot]):
    """Service for managing weekly timetable slots.

    Provides, on top of BaseService:
    - create_slot(...): Validate, derive title and persist a slot
    - update_slot(id, **patch): Merge, re-validate and persist a patch
    - delete(id): Hard delete (inherited)
    - get_slot(id): Slot with degree/subject/teacher/room attached
    - list_ordered(**filters): Filtered slots in weekly-grid order
    - find_conflicts(...): Informational overlap report

    Usage:
        service = WeeklySlotService(db_session)
        slot = await service.create_slot(
            degree_id="bac2", subject_id=1, teacher_id=3, day_of_week=1,
            start_time="08:00", end_time="09:00",
        )

    Attributes:
        model: WeeklySlot model class
        db: Database session for operations
        resolver: Degree alias resolver
    """

    model = WeeklySlot

    def __init__(
        self, db: AsyncSession, resolver: Optional[DegreeResolver] = None
    ) -> None:
        super().__init__(db)
        self.resolver = resolver or DegreeResolver(db)

    async def create_slot(
        self,
        *,
        degree_id: Any,
        subject_id: int,
        teacher_id: int,
        day_of_week: int,
        room_id: Optional[int] = None,
        period: Optional[str] = None,
        start_time: Any = None,
        end_time: Any = None,
        title: Optional[str] = None,
    ) -> WeeklySlot:
        """Validate and persist a new slot.

        Raises:
            FieldValidationError: If the degree is unknown, the day is out of
                range or the time expression is invalid
            RelatedRecordNotFoundError: If subject, teacher or room is missing
            DatabaseConnectionError: If database operation fails
        """
        values = {
            "degree_id": degree_id,
            "subject_id": subject_id,
            "teacher_id": teacher_id,
            "room_id": room_id,
            "day_of_week": day_of_week,
            "period": period,
            "start_time": start_time,
            "end_time": end_time,
            "title": title,
        }
        fields = await self._prepare(values, resolve_degree=True)
        slot = await self.create(**fields)
        return await self.get_slot(slot.id)

    async def update_slot(self, slot_id: int, **patch: Any) -> WeeklySlot:
        """Apply a partial update.

        The patch is merged onto the stored row before the time invariant is
        checked again, so a patch that would leave the slot without a period
        and without a complete time pair is rejected. The title is derived
        again unless the patch carries a non-blank one.

        Raises:
            RecordNotFoundError: If slot not found
            InvalidFilterError: If the patch names an unknown field
            FieldValidationError: If the merged slot is invalid
            DuplicateRecordError: If the database refuses the row on a constraint
            DatabaseConnectionError: If database operation fails
        """
        for key in patch:
            if key not in SLOT_FIELDS:
                raise InvalidFilterError(
                    f"Invalid attribute '{key}' for model {self.model.__name__}"
                )

        slot = await self.get_by_id_or_fail(slot_id)
        merged = {name: getattr(slot, name) for name in SLOT_FIELDS}
        merged.update(patch)
        if "title" not in patch:
            merged["title"] = None

        fields = await self._prepare(merged, resolve_degree="degree_id" in patch)

        try:
            for key, value in fields.items():
                setattr(slot, key, value)
            await self.db.flush()
            await self.db.commit()
            logger.debug(
                "Updated WeeklySlot",
                extra={"model": self.model.__name__, "id": slot_id},
            )
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Integrity violation updating WeeklySlot",
                extra={"model": self.model.__name__, "id": slot_id, "error": str(e)},
            )
            raise DuplicateRecordError(
                self.model.__name__, detail=f"Integrity constraint violation: {str(e)}"
            ) from e
        except (DBAPIError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(
                "Failed to update WeeklySlot",
                extra={"model": self.model.__name__, "id": slot_id, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during update: {str(e)}"
            ) from e

        return await self.get_slot(slot_id)

    async def get_slot(self, slot_id: int) -> WeeklySlot:
        """Get a slot with its relations attached.

        Raises:
            RecordNotFoundError: If slot not found
        """
        try:
            result = await self.db.execute(
                self._hydrated().where(WeeklySlot.id == slot_id)
            )
            slot = result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            raise DatabaseConnectionError(f"Database error during get: {str(e)}") from e
        if slot is None:
            raise RecordNotFoundError(self.model.__name__, slot_id)
        return slot

    async def list_ordered(self, **filters: Any) -> List[WeeklySlot]:
        """List slots matching equality filters in weekly-grid order.

        Filters with a None value are ignored. The order is degree id, day of
        week, then the time-of-day key, and is recomputed on every call.

        Raises:
            InvalidFilterError: If a filter is not one of FILTER_FIELDS
            DatabaseConnectionError: If database operation fails
        """
        query = self._hydrated()
        for key, value in filters.items():
            if key not in FILTER_FIELDS:
                raise InvalidFilterError(
                    f"Invalid filter key '{key}' for model {self.model.__name__}"
                )
            if value is not None:
                query = query.where(getattr(WeeklySlot, key) == value)

        try:
            result = await self.db.execute(query)
            slots = list(result.scalars().all())
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                "Failed to list WeeklySlot",
                extra={"filters": filters, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during list: {str(e)}"
            ) from e

        return sorted(slots, key=weekly_order)

    async def find_conflicts(
        self, degree_id: Optional[int] = None, teacher_id: Optional[int] = None
    ) -> List[SlotConflict]:
        """Report explicit-time slots that overlap on the same day.

        Two overlapping slots conflict when they share the degree, the
        teacher or a room. The report is informational; writes never check
        it. When filters are given, only pairs touching a matching slot are
        returned.
        """
        slots = await self.list_ordered()

        def matches(slot: WeeklySlot) -> bool:
            if degree_id is not None and slot.degree_id != degree_id:
                return False
            if teacher_id is not None and slot.teacher_id != teacher_id:
                return False
            return True

        timed = [(slot, slot_range(slot)) for slot in slots]
        timed = [(slot, rng) for slot, rng in timed if rng is not None]

        conflicts: List[SlotConflict] = []
        for i, (first, first_range) in enumerate(timed):
            for second, second_range in timed[i + 1 :]:
                if first.day_of_week != second.day_of_week:
                    continue
                if not minutes_overlap(first_range, second_range):
                    continue
                if not (matches(first) or matches(second)):
                    continue
                reasons = []
                if first.degree_id == second.degree_id:
                    reasons.append("degree")
                if first.teacher_id == second.teacher_id:
                    reasons.append("teacher")
                if first.room_id is not None and first.room_id == second.room_id:
                    reasons.append("room")
                if reasons:
                    conflicts.append(SlotConflict(first, second, tuple(reasons)))
        return conflicts

    async def _prepare(self, values: dict[str, Any], resolve_degree: bool) -> dict[str, Any]:
        """Validate a complete set of slot fields and derive the title."""
        day = values.get("day_of_week")
        if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 7:
            raise FieldValidationError.for_field(
                "day_of_week", "day_of_week must be an integer between 1 and 7"
            )

        when = validate_time_expression(
            values.get("period"), values.get("start_time"), values.get("end_time")
        )

        degree_id = values.get("degree_id")
        if resolve_degree:
            degree_id = await self.resolver.require_degree(degree_id)

        subject = await self.require_related(Subject, "subject_id", values.get("subject_id"))
        teacher = await self.require_related(User, "teacher_id", values.get("teacher_id"))
        room_id = values.get("room_id")
        if room_id is not None:
            await self.require_related(Room, "room_id", room_id)

        title = values.get("title")
        title = title.strip() if isinstance(title, str) else None
        if not title:
            title = compose_title(subject.name, teacher.full_name, day, when)

        return {
            "degree_id": degree_id,
            "subject_id": subject.id,
            "teacher_id": teacher.id,
            "room_id": room_id,
            "day_of_week": day,
            "title": title,
            **when.as_fields(),
        }

    def _hydrated(self):
        return (
            select(WeeklySlot)
            .options(
                selectinload(WeeklySlot.degree),
                selectinload(WeeklySlot.subject),
                selectinload(WeeklySlot.teacher),
                selectinload(WeeklySlot.room),
            )
            .execution_options(populate_existing=True)
        )
