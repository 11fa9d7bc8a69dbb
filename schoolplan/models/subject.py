"""Subject model representing taught subjects."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from schoolplan.models.base import BaseModel


class Subject(BaseModel):
    """Subject model for storing taught subjects.

    Attributes:
        name: Name of the subject (e.g., "Mathematique", "Physique & Chimie")
        code: Optional short code (e.g., "MATH")
        created_at: Timestamp when record was created (inherited)
        updated_at: Timestamp when record was last updated (inherited)
    """

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)

    def __repr__(self) -> str:
        """String representation of the subject."""
        return f"Subject(id={self.id}, name={self.name!r}, code={self.code!r})"
