"""Base model class with primary key and timestamp tracking."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from schoolplan.utils.db import Base


class BaseModel(Base):
    """Abstract base class for SQLAlchemy models.

    Provides common columns for all models:
    - Primary key (id)
    - Timestamps (created_at, updated_at)

    Writes go through the service layer (``schoolplan.services``), which owns
    transactions.

    Usage:
        class Room(BaseModel):
            __tablename__ = "rooms"

            name: Mapped[str] = mapped_column(String(100), unique=True)
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
