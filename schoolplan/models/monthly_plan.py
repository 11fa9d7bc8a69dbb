"""Monthly plan entry model: dated curriculum planning notes."""

from datetime import date
from typing import Any, Optional

from sqlalchemy import (
    Computed,
    Date,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolplan.models.base import BaseModel
from schoolplan.models.degree import Degree
from schoolplan.models.subject import Subject
from schoolplan.models.user import User

NATURAL_KEY_FIELDS = ("plan_date", "degree_id", "subject_id", "teacher_id", "sequence")


class MonthlyPlanEntry(BaseModel):
    """Planned coverage of one subject for a degree on a calendar date.

    The natural key is (plan_date, degree_id, subject_id, teacher_id,
    sequence). A missing teacher is a key value of its own: ``teacher_key`` is a
    stored column computed by the database as ``coalesce(teacher_id, 0)``, and
    the unique constraint is declared on it so that two teacherless entries
    collide like any others. Being computed, it also follows ``teacher_id`` when
    deleting the teacher sets it to NULL.

    Attributes:
        plan_date: Calendar date the entry is planned for
        degree_id: Degree the entry is for
        subject_id: Subject planned
        teacher_id: Optional teacher (user)
        teacher_key: teacher_id with None as 0, computed by the database
        sequence: Discriminator between entries sharing the other key fields
        title: Optional short title
        notes: Optional free text
    """

    __tablename__ = "monthly_subject_plans"

    plan_date: Mapped[date] = mapped_column(Date, nullable=False)
    degree_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("degrees.id", ondelete="CASCADE"), nullable=False
    )
    subject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    teacher_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    teacher_key: Mapped[int] = mapped_column(
        Integer, Computed("coalesce(teacher_id, 0)", persisted=True), nullable=False
    )
    sequence: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=1, server_default="1"
    )
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    degree: Mapped[Optional[Degree]] = relationship(
        "Degree", lazy="noload", foreign_keys=[degree_id]
    )
    subject: Mapped[Optional[Subject]] = relationship(
        "Subject", lazy="noload", foreign_keys=[subject_id]
    )
    teacher: Mapped[Optional[User]] = relationship(
        "User", lazy="noload", foreign_keys=[teacher_id]
    )

    __table_args__ = (
        UniqueConstraint(
            "plan_date",
            "degree_id",
            "subject_id",
            "teacher_key",
            "sequence",
            name="msp_uniq",
        ),
        Index("msp_plan_deg_idx", "plan_date", "degree_id"),
    )

    def natural_key(self) -> dict[str, Any]:
        """Key fields of this entry, as reported in conflicts."""
        return {name: getattr(self, name) for name in NATURAL_KEY_FIELDS}

    def __repr__(self) -> str:
        return (
            f"MonthlyPlanEntry(id={self.id}, plan_date={self.plan_date}, "
            f"degree_id={self.degree_id}, subject_id={self.subject_id}, "
            f"teacher_id={self.teacher_id}, sequence={self.sequence})"
        )
