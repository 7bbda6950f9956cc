"""Pantry item lifecycle: add-with-merge, quantity changes, opening and deletion."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from larder import metrics
from larder.errors import ConflictError, InvalidInputError, NotFoundError
from larder.expiry import opened_expiry_date
from larder.models.pantry import ItemWriteResult, PantryItem

from .models import PantryItemORM, StorageAreaORM, name_key
from .repository import session_scope

logger = logging.getLogger(__name__)


def _to_model(row: PantryItemORM) -> PantryItem:
    return PantryItem.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "quantity": row.quantity,
            "storage_area_id": row.storage_area_id,
            "created_at": row.created_at,
            "is_opened": row.is_opened,
            "opened_at": row.opened_at,
            "expiry_date": row.expiry_date,
        }
    )


def _find_mergeable(
    session: Session, storage_area_id: str, name: str, expiry_date: Optional[date]
) -> Optional[PantryItemORM]:
    stmt = select(PantryItemORM).where(
        PantryItemORM.storage_area_id == storage_area_id,
        PantryItemORM.name_key == name_key(name),
        PantryItemORM.is_opened.is_(False),
    )
    if expiry_date is None:
        stmt = stmt.where(PantryItemORM.expiry_date.is_(None))
    else:
        stmt = stmt.where(PantryItemORM.expiry_date == expiry_date)
    return session.execute(stmt.limit(1)).scalars().first()


def _require_item(session: Session, item_id: str) -> PantryItemORM:
    row = session.get(PantryItemORM, item_id)
    if row is None:
        raise NotFoundError(f"Item {item_id} not found")
    return row


def list_items() -> List[PantryItem]:
    """Return every item ordered by name."""

    with session_scope() as session:
        rows = (
            session.execute(select(PantryItemORM).order_by(PantryItemORM.name, PantryItemORM.id))
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def list_items_by_area(storage_area_id: str) -> List[PantryItem]:
    with session_scope() as session:
        rows = (
            session.execute(
                select(PantryItemORM)
                .where(PantryItemORM.storage_area_id == storage_area_id)
                .order_by(PantryItemORM.name, PantryItemORM.id)
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def list_item_names() -> List[str]:
    """Distinct item names in stock, first spelling wins for case variants."""

    names: dict[str, str] = {}
    for item in list_items():
        names.setdefault(item.name.lower(), item.name)
    return list(names.values())


def get_item(item_id: str) -> Optional[PantryItem]:
    with session_scope() as session:
        row = session.get(PantryItemORM, item_id)
        if row is None:
            return None
        return _to_model(row)


def create_or_merge_item(
    *,
    name: str,
    quantity: int,
    storage_area_id: str,
    expiry_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ItemWriteResult:
    """Fold ``quantity`` into a matching unopened item, or store a new one."""

    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidInputError("Name is required")
    if quantity is None or quantity < 1:
        raise InvalidInputError("Quantity must be at least 1")
    if not storage_area_id:
        raise InvalidInputError("Storage area ID is required")

    # BEGIN IMMEDIATE serializes concurrent adds; the partial unique index backs it up.
    with session_scope() as session:
        if session.get(StorageAreaORM, storage_area_id) is None:
            raise NotFoundError(f"Storage area {storage_area_id} not found")

        existing = _find_mergeable(session, storage_area_id, trimmed, expiry_date)
        if existing is not None:
            existing.quantity = existing.quantity + quantity
            session.flush()
            metrics.ITEM_EVENTS.labels(event="merged").inc()
            logger.info(
                "Merged %s into item id=%s quantity=%s",
                quantity,
                existing.id,
                existing.quantity,
                extra={"item_id": existing.id, "storage_area_id": storage_area_id},
            )
            return ItemWriteResult(item=_to_model(existing), merged=True)

        row = PantryItemORM(
            id=uuid4().hex,
            name=trimmed,
            name_key=name_key(trimmed),
            quantity=quantity,
            storage_area_id=storage_area_id,
            created_at=now or datetime.now(),
            is_opened=False,
            opened_at=None,
            expiry_date=expiry_date,
        )
        session.add(row)
        try:
            session.flush()
        except IntegrityError as exc:
            logger.warning(
                "Mergeable key collision area=%s name=%s expiry=%s",
                storage_area_id,
                trimmed,
                expiry_date,
            )
            raise ConflictError(
                f"An unopened {trimmed} already exists in storage area {storage_area_id}"
            ) from exc
        metrics.ITEM_EVENTS.labels(event="created").inc()
        logger.info(
            "Created item id=%s name=%s quantity=%s",
            row.id,
            row.name,
            row.quantity,
            extra={"item_id": row.id, "storage_area_id": storage_area_id},
        )
        return ItemWriteResult(item=_to_model(row), merged=False)


def adjust_quantity(item_id: str, new_quantity: int) -> Optional[PantryItem]:
    """Set the absolute quantity; anything below one deletes the item and returns None."""

    with session_scope() as session:
        row = _require_item(session, item_id)
        if new_quantity < 1:
            session.delete(row)
            metrics.ITEM_EVENTS.labels(event="deleted").inc()
            logger.info("Quantity of item %s dropped to %s; deleted", item_id, new_quantity)
            return None

        row.quantity = new_quantity
        session.flush()
        return _to_model(row)


def open_item(
    item_id: str,
    quantity_to_open: int,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> List[PantryItem]:
    """Open some or all of an item.

    Opening everything flips the record in place and returns it alone. Opening
    part of it splits off a new opened record carrying the original's name,
    area and ``created_at``; the result is ``[remaining, opened]`` and the
    quantities sum to the original.
    """

    if quantity_to_open is None or quantity_to_open < 1:
        raise InvalidInputError("Quantity to open must be at least 1")

    opened_at = now or datetime.now()
    with session_scope() as session:
        row = _require_item(session, item_id)
        new_expiry = opened_expiry_date(row.expiry_date, today or opened_at.date())

        if quantity_to_open >= row.quantity:
            row.is_opened = True
            row.opened_at = opened_at
            row.expiry_date = new_expiry
            session.flush()
            metrics.ITEM_EVENTS.labels(event="opened").inc()
            logger.info("Opened item id=%s expiry=%s", row.id, new_expiry, extra={"item_id": row.id})
            return [_to_model(row)]

        row.quantity = row.quantity - quantity_to_open
        opened = PantryItemORM(
            id=uuid4().hex,
            name=row.name,
            name_key=row.name_key,
            quantity=quantity_to_open,
            storage_area_id=row.storage_area_id,
            created_at=row.created_at,
            is_opened=True,
            opened_at=opened_at,
            expiry_date=new_expiry,
        )
        session.add(opened)
        session.flush()
        metrics.ITEM_EVENTS.labels(event="split").inc()
        logger.info(
            "Split item id=%s: %s remain unopened, %s opened as id=%s",
            row.id,
            row.quantity,
            opened.quantity,
            opened.id,
            extra={"item_id": row.id},
        )
        return [_to_model(row), _to_model(opened)]


def delete_item(item_id: str) -> None:
    with session_scope() as session:
        row = _require_item(session, item_id)
        session.delete(row)
        metrics.ITEM_EVENTS.labels(event="deleted").inc()


__all__ = [
    "adjust_quantity",
    "create_or_merge_item",
    "delete_item",
    "get_item",
    "list_item_names",
    "list_items",
    "list_items_by_area",
    "open_item",
]
