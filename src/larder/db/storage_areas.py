"""Storage area persistence, ordering and cascading deletion."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from larder.errors import InvalidInputError, NotFoundError
from larder.models.pantry import StorageArea

from .models import PantryItemORM, StorageAreaORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _to_model(row: StorageAreaORM) -> StorageArea:
    return StorageArea.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "icon": row.icon,
            "color": row.color,
            "order": row.position,
        }
    )


def _ordered_rows(session: Session) -> List[StorageAreaORM]:
    return list(
        session.execute(
            select(StorageAreaORM).order_by(StorageAreaORM.position, StorageAreaORM.id)
        )
        .scalars()
        .all()
    )


def _repack(rows: Sequence[StorageAreaORM]) -> None:
    """Assign positions ``0..len(rows)-1`` following the sequence order."""

    for index, row in enumerate(rows):
        row.position = index


def list_storage_areas() -> List[StorageArea]:
    """Return all storage areas by display order."""

    with session_scope() as session:
        return [_to_model(row) for row in _ordered_rows(session)]


def get_storage_area(area_id: str) -> Optional[StorageArea]:
    with session_scope() as session:
        row = session.get(StorageAreaORM, area_id)
        if row is None:
            return None
        return _to_model(row)


def create_storage_area(*, name: str, icon: str, color: str) -> StorageArea:
    """Append a new area after the current last one."""

    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidInputError("Name is required")

    with session_scope() as session:
        max_position = session.execute(select(func.max(StorageAreaORM.position))).scalar()
        row = StorageAreaORM(
            id=uuid4().hex,
            name=trimmed,
            icon=icon,
            color=color,
            position=0 if max_position is None else max_position + 1,
        )
        session.add(row)
        session.flush()
        logger.info("Created storage area id=%s name=%s order=%s", row.id, row.name, row.position)
        return _to_model(row)


def update_storage_area(
    area_id: str,
    *,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None,
    order: Optional[int] = None,
) -> StorageArea:
    """Apply a partial update; a blank ``name`` keeps the current name."""

    with session_scope() as session:
        row = session.get(StorageAreaORM, area_id)
        if row is None:
            raise NotFoundError(f"Storage area {area_id} not found")

        if name is not None and name.strip():
            row.name = name.strip()
        elif name is not None:
            logger.debug("Ignoring blank name update for storage area %s", area_id)
        if icon:
            row.icon = icon
        if color:
            row.color = color
        if order is not None and order != row.position:
            # Moving one area shifts the others so positions stay contiguous.
            others = [other for other in _ordered_rows(session) if other.id != row.id]
            target = max(0, min(order, len(others)))
            others.insert(target, row)
            _repack(others)

        session.flush()
        return _to_model(row)


def delete_storage_area(area_id: str) -> None:
    """Delete an area together with its items and close the gap in the ordering."""

    with session_scope() as session:
        row = session.get(StorageAreaORM, area_id)
        if row is None:
            raise NotFoundError(f"Storage area {area_id} not found")

        removed = session.execute(
            delete(PantryItemORM).where(PantryItemORM.storage_area_id == area_id)
        ).rowcount
        session.delete(row)
        session.flush()
        _repack(_ordered_rows(session))
        logger.info("Deleted storage area id=%s with %s item(s)", area_id, removed)


def reorder_storage_areas(ordered_ids: Sequence[str]) -> List[StorageArea]:
    """Give the listed areas positions ``0..k-1``; unlisted areas follow in prior order."""

    seen: set[str] = set()
    for area_id in ordered_ids:
        if area_id in seen:
            raise InvalidInputError(f"Storage area {area_id} listed more than once")
        seen.add(area_id)

    with session_scope() as session:
        rows = _ordered_rows(session)
        by_id = {row.id: row for row in rows}
        missing = [area_id for area_id in ordered_ids if area_id not in by_id]
        if missing:
            raise NotFoundError(f"Storage area {missing[0]} not found")

        listed = [by_id[area_id] for area_id in ordered_ids]
        omitted = [row for row in rows if row.id not in seen]
        if omitted:
            logger.debug(
                "Reorder omitted %s area(s); appending them after listed ids", len(omitted)
            )
        _repack(listed + omitted)
        session.flush()
        return [_to_model(row) for row in _ordered_rows(session)]


__all__ = [
    "create_storage_area",
    "delete_storage_area",
    "get_storage_area",
    "list_storage_areas",
    "reorder_storage_areas",
    "update_storage_area",
]
