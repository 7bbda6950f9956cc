"""SQLAlchemy models representing Larder persistence tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def name_key(name: str) -> str:
    """Comparison key for case-insensitive name matching, folded in Python."""

    return name.strip().lower()


class Base(DeclarativeBase):
    """Declarative base class for Larder ORM models."""


class StorageAreaORM(Base):
    """Storage area row; ``position`` holds the display order."""

    __tablename__ = "storage_areas"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    icon: Mapped[str] = mapped_column(String(32), nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False)
    position: Mapped[int] = mapped_column("order", Integer, nullable=False)


class PantryItemORM(Base):
    """Pantry item persisted in the SQLite database."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    storage_area_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("storage_areas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_opened: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    opened_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


# At most one unopened record per mergeable key; opened records are exempt.
Index(
    "uq_items_mergeable_key",
    PantryItemORM.storage_area_id,
    PantryItemORM.name_key,
    func.coalesce(PantryItemORM.expiry_date, ""),
    unique=True,
    sqlite_where=PantryItemORM.is_opened.is_(False),
)


class DislikedRecipeORM(Base):
    """Recipe name the household does not want suggested again."""

    __tablename__ = "disliked_recipes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


__all__ = [
    "Base",
    "DislikedRecipeORM",
    "PantryItemORM",
    "StorageAreaORM",
    "name_key",
]
