"""User model for the identity records referenced by planning data."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from schoolplan.models.base import BaseModel
from schoolplan.utils.aliases import resolve_role


class User(BaseModel):
    """Person known to the school: student, teacher, parent or admin.

    This service never creates or edits users through its API; the table is
    read for existence checks (teachers of lessons and plans) and for the
    per-user timetable views.

    Attributes:
        firstname: Given name
        lastname: Family name
        email: Optional unique email
        role: Canonical role, normalised from French/legacy synonyms on write
        degree_id: Degree a student is enrolled in
        parent_id: Parent account of a student
    """

    __tablename__ = "users"

    firstname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    lastname: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, unique=True
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    degree_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("degrees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    @validates("role")
    def _normalize_role(self, key: str, value: Optional[str]) -> Optional[str]:
        return resolve_role(value)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.firstname, self.lastname) if part)

    def __repr__(self) -> str:
        return f"User(id={self.id}, role={self.role!r}, name={self.full_name!r})"
