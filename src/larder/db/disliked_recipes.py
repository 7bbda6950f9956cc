"""Data access helpers for the disliked-recipe list."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from larder.errors import ConflictError, InvalidInputError
from larder.models.recipes import DislikedRecipe

from .models import DislikedRecipeORM, name_key
from .repository import session_scope

logger = logging.getLogger(__name__)


def _to_model(row: DislikedRecipeORM) -> DislikedRecipe:
    return DislikedRecipe.model_validate(
        {"id": row.id, "name": row.name, "created_at": row.created_at}
    )


def _find_by_name(session: Session, name: str) -> Optional[DislikedRecipeORM]:
    return (
        session.execute(
            select(DislikedRecipeORM).where(DislikedRecipeORM.name_key == name_key(name))
        )
        .scalars()
        .first()
    )


def list_disliked_recipes() -> List[DislikedRecipe]:
    with session_scope() as session:
        rows = (
            session.execute(select(DislikedRecipeORM).order_by(DislikedRecipeORM.created_at.desc()))
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def disliked_recipe_names() -> List[str]:
    """Lower-cased names, ready for case-insensitive comparisons."""

    with session_scope() as session:
        return list(session.execute(select(DislikedRecipeORM.name_key)).scalars().all())


def add_disliked_recipe(name: str) -> tuple[DislikedRecipe, bool]:
    """Record ``name``; returns the stored entry and whether it was newly created."""

    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidInputError("Recipe name is required")

    with session_scope() as session:
        existing = _find_by_name(session, trimmed)
        if existing is not None:
            return _to_model(existing), False

        row = DislikedRecipeORM(
            id=uuid4().hex,
            name=trimmed,
            name_key=name_key(trimmed),
            created_at=datetime.now(),
        )
        session.add(row)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError(f"Recipe {trimmed} is already disliked") from exc
        logger.info("Disliked recipe recorded name=%s", trimmed)
        return _to_model(row), True


def remove_disliked_recipe(name: str) -> None:
    """Forget ``name`` (case-insensitive); removing an unknown name is a no-op."""

    with session_scope() as session:
        session.execute(
            delete(DislikedRecipeORM).where(DislikedRecipeORM.name_key == name_key(name))
        )


def is_disliked(name: str) -> bool:
    with session_scope() as session:
        return _find_by_name(session, name) is not None


__all__ = [
    "add_disliked_recipe",
    "disliked_recipe_names",
    "is_disliked",
    "list_disliked_recipes",
    "remove_disliked_recipe",
]
