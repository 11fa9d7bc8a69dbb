"""Degree model representing school levels (classes of students)."""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolplan.models.base import BaseModel


class Degree(BaseModel):
    """School level such as "Tronc Commun" or "2ème année Bac".

    Only rows with a slug are canonical. Legacy rows kept from older imports
    have ``slug = NULL`` and are never exposed or accepted as references.

    Attributes:
        name: Display label
        slug: Stable identifier of a canonical degree, None for legacy rows
        position: Display order among canonical degrees
    """

    __tablename__ = "degrees"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def is_canonical(self) -> bool:
        return self.slug is not None

    def __repr__(self) -> str:
        return f"Degree(id={self.id}, slug={self.slug!r}, name={self.name!r})"
