"""Room model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from schoolplan.models.base import BaseModel


class Room(BaseModel):
    """Classroom a lesson can be held in."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"Room(id={self.id}, name={self.name!r})"
