"""Weekly slot model: one recurring lesson of the weekly timetable."""

from datetime import time
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, SmallInteger, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolplan.models.base import BaseModel
from schoolplan.models.degree import Degree
from schoolplan.models.room import Room
from schoolplan.models.subject import Subject
from schoolplan.models.user import User


class WeeklySlot(BaseModel):
    """Recurring lesson (degree × subject × teacher × day × time).

    The time of day is given by a free-form ``period`` label, by an explicit
    ``start_time``/``end_time`` pair, or both. At least one form is always
    present; the services enforce it before any write.

    Attributes:
        degree_id: Degree (class) attending the lesson
        subject_id: Subject taught
        teacher_id: User teaching the lesson
        room_id: Optional room
        day_of_week: ISO weekday, Monday = 1
        period: Optional free-form period label
        start_time: Optional explicit start
        end_time: Optional explicit end, strictly after start
        title: Display string, derived server-side unless given explicitly
    """

    __tablename__ = "timetables"

    degree_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("degrees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    period: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    degree: Mapped[Optional[Degree]] = relationship(
        "Degree", lazy="noload", foreign_keys=[degree_id]
    )
    subject: Mapped[Optional[Subject]] = relationship(
        "Subject", lazy="noload", foreign_keys=[subject_id]
    )
    teacher: Mapped[Optional[User]] = relationship(
        "User", lazy="noload", foreign_keys=[teacher_id]
    )
    room: Mapped[Optional[Room]] = relationship(
        "Room", lazy="noload", foreign_keys=[room_id]
    )

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_timetables_day_of_week"),
    )

    def __repr__(self) -> str:
        return (
            f"WeeklySlot(id={self.id}, degree_id={self.degree_id}, "
            f"day_of_week={self.day_of_week}, period={self.period!r}, "
            f"start_time={self.start_time}, end_time={self.end_time})"
        )
