"""Storage area and pantry item data models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AreaIcon = Literal["refrigerator", "snowflake", "warehouse", "box", "home", "archive", "package"]
AreaColor = Literal["slate", "blue", "cyan", "emerald", "amber", "violet", "rose"]


class StorageArea(BaseModel):
    """Named place where items are kept (fridge, freezer, pantry, ...)."""

    id: str
    name: str
    icon: AreaIcon
    color: AreaColor
    order: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class PantryItem(BaseModel):
    """A quantity of one named item inside a storage area."""

    id: str
    name: str
    quantity: int = Field(ge=1)
    storage_area_id: str
    created_at: datetime
    is_opened: bool = Field(default=False)
    opened_at: Optional[datetime] = Field(default=None)
    expiry_date: Optional[date] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    def mergeable_key(self) -> tuple[str, str, Optional[date]]:
        """Return the (area, case-folded name, expiry) tuple used for merging."""

        return (self.storage_area_id, self.name.lower(), self.expiry_date)


class ItemWriteResult(BaseModel):
    """Outcome of an add request: the stored record and whether it merged."""

    item: PantryItem
    merged: bool

    model_config = ConfigDict(frozen=True)


DEFAULT_STORAGE_AREAS: tuple[StorageArea, ...] = (
    StorageArea(id="fridge", name="Fridge", icon="refrigerator", color="cyan", order=0),
    StorageArea(id="freezer", name="Freezer", icon="snowflake", color="blue", order=1),
    StorageArea(id="pantry", name="Pantry", icon="warehouse", color="amber", order=2),
)


__all__ = [
    "AreaColor",
    "AreaIcon",
    "DEFAULT_STORAGE_AREAS",
    "ItemWriteResult",
    "PantryItem",
    "StorageArea",
]
