"""Unit tests for model-level behaviour."""

from datetime import date

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolplan.models import MonthlyPlanEntry, User, WeeklySlot
from schoolplan.services.monthly_plan_service import MonthlyPlanService


class TestMonthlyPlanEntry:
    """Key helpers of the plan entry model."""

    def test_natural_key(self):
        """Test: natural_key() lists the five key fields."""
        entry = MonthlyPlanEntry(
            plan_date=None, degree_id=1, subject_id=2, teacher_id=3, sequence=4
        )

        assert entry.natural_key() == {
            "plan_date": None,
            "degree_id": 1,
            "subject_id": 2,
            "teacher_id": 3,
            "sequence": 4,
        }


class TestUser:
    """Role normalisation and display name."""

    @pytest.mark.parametrize(
        "role, expected",
        [("Élève", "student"), ("Enseignant", "teacher"), ("ADMIN", "admin")],
    )
    def test_role_is_normalised(self, role, expected):
        """Test: Legacy role names are stored canonically."""
        assert User(role=role).role == expected

    def test_full_name(self):
        """Test: full_name skips missing parts."""
        assert User(firstname="Amina", lastname="Idrissi").full_name == "Amina Idrissi"
        assert User(lastname="Idrissi").full_name == "Idrissi"
        assert User().full_name == ""


@pytest.mark.asyncio
async def test_day_of_week_check_constraint(db_session: AsyncSession, catalog):
    """Test: The database itself refuses days outside 1..7."""
    slot = WeeklySlot(
        degree_id=catalog.degrees["bac2"].id,
        subject_id=catalog.math.id,
        teacher_id=catalog.teacher.id,
        day_of_week=8,
        period="P1",
    )
    db_session.add(slot)

    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_teacherless_entries_collide(db_session: AsyncSession, catalog):
    """Test: Two entries without teacher and the same key violate msp_uniq."""
    fields = {
        "plan_date": date(2025, 9, 1),
        "degree_id": catalog.degrees["bac2"].id,
        "subject_id": catalog.math.id,
        "teacher_id": None,
        "sequence": 1,
    }
    db_session.add(MonthlyPlanEntry(**fields))
    await db_session.commit()

    db_session.add(MonthlyPlanEntry(**fields))
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()

    result = await db_session.execute(select(MonthlyPlanEntry.id))
    assert len(result.all()) == 1


@pytest.mark.asyncio
async def test_teacher_key_is_computed_by_database(db_session: AsyncSession, catalog):
    """Test: teacher_key holds the teacher id, or 0 for a teacherless entry."""
    # Arrange
    common = {
        "plan_date": date(2025, 9, 2),
        "degree_id": catalog.degrees["bac2"].id,
        "subject_id": catalog.math.id,
    }
    db_session.add_all(
        [
            MonthlyPlanEntry(**common, teacher_id=catalog.teacher.id),
            MonthlyPlanEntry(**common, teacher_id=None),
        ]
    )
    await db_session.commit()

    # Act
    result = await db_session.execute(
        select(MonthlyPlanEntry.teacher_id, MonthlyPlanEntry.teacher_key).order_by(
            MonthlyPlanEntry.id
        )
    )

    # Assert
    assert result.all() == [(catalog.teacher.id, catalog.teacher.id), (None, 0)]


@pytest.mark.asyncio
async def test_deleting_teacher_resets_teacher_key(db_session: AsyncSession, catalog):
    """Test: ON DELETE SET NULL also resets teacher_key, so the row keys as teacherless."""
    # Arrange
    entry = MonthlyPlanEntry(
        plan_date=date(2025, 9, 3),
        degree_id=catalog.degrees["bac2"].id,
        subject_id=catalog.math.id,
        teacher_id=catalog.teacher.id,
        title="Avant départ",
    )
    db_session.add(entry)
    await db_session.commit()
    entry_id = entry.id
    db_session.expunge_all()

    # Act
    await db_session.execute(
        text("DELETE FROM users WHERE id = :id"), {"id": catalog.teacher.id}
    )
    await db_session.commit()

    # Assert
    result = await db_session.execute(
        select(MonthlyPlanEntry.teacher_id, MonthlyPlanEntry.teacher_key).where(
            MonthlyPlanEntry.id == entry_id
        )
    )
    assert result.one() == (None, 0)

    service = MonthlyPlanService(db_session, sequence_enabled=False)
    updated = await service.upsert(
        plan_date=date(2025, 9, 3),
        degree_id=catalog.degrees["bac2"].id,
        subject_id=catalog.math.id,
        title="Après départ",
    )
    assert updated.id == entry_id
    assert updated.title == "Après départ"
    count = await db_session.execute(select(MonthlyPlanEntry.id))
    assert len(count.all()) == 1
