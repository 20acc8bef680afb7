"""Shopping list persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from swipechef.meals.errors import ShoppingListNotFoundError
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import DEFAULT_LIST_NAME, Product, ShoppingList, ShoppingListItem

from .models import ShoppingListItemORM, ShoppingListORM
from .repository import session_scope

DEFAULT_OWNER = "default"

logger = logging.getLogger(__name__)


def _item_to_model(row: ShoppingListItemORM) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "id": row.id,
            "search_query": row.search_query,
            "product": {
                "title": row.title,
                "price": row.price,
                "source": row.source,
                "link": row.link,
                "redirect_link": row.redirect_link,
                "thumbnail": row.thumbnail,
                "rating": row.rating,
                "reviews": row.reviews,
            },
            "quantity": row.quantity,
            "added_at": row.added_at,
        }
    )


def _load_meals(documents: Optional[List[dict]]) -> List[MealSuggestion]:
    meals: List[MealSuggestion] = []
    for index, entry in enumerate(documents or []):
        try:
            meals.append(MealSuggestion.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping stored meal suggestion %s: %s", index, exc)
    return meals


def _to_model(row: ShoppingListORM) -> ShoppingList:
    return ShoppingList.model_validate(
        {
            "id": row.id,
            "owner": row.owner,
            "name": row.name,
            "items": [_item_to_model(item) for item in row.items],
            "meal_suggestions": _load_meals(row.meal_suggestions),
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


def _get_row(session: Session, list_id: int, owner: Optional[str]) -> ShoppingListORM:
    row = session.get(ShoppingListORM, list_id)
    if row is None or (owner is not None and row.owner != owner):
        raise ShoppingListNotFoundError(list_id)
    return row


def create_shopping_list(*, name: Optional[str] = None, owner: Optional[str] = None) -> ShoppingList:
    with session_scope() as session:
        row = ShoppingListORM(
            owner=(owner or DEFAULT_OWNER).strip(),
            name=(name or "").strip() or DEFAULT_LIST_NAME,
            meal_suggestions=[],
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def list_shopping_lists(owner: Optional[str] = None) -> List[ShoppingList]:
    """Return shopping lists, newest first, optionally restricted to one owner."""

    with session_scope() as session:
        query = select(ShoppingListORM).order_by(
            ShoppingListORM.created_at.desc(),
            ShoppingListORM.id.desc(),
        )
        if owner is not None:
            query = query.where(ShoppingListORM.owner == owner)
        rows = session.execute(query).scalars().all()
        return [_to_model(row) for row in rows]


def get_shopping_list(list_id: int, owner: Optional[str] = None) -> Optional[ShoppingList]:
    with session_scope() as session:
        row = session.get(ShoppingListORM, list_id)
        if row is None or (owner is not None and row.owner != owner):
            return None
        return _to_model(row)


def add_shopping_list_item(
    list_id: int,
    *,
    product: Product,
    search_query: Optional[str] = None,
    quantity: int = 1,
    owner: Optional[str] = None,
) -> ShoppingList:
    with session_scope() as session:
        row = _get_row(session, list_id, owner)
        row.items.append(
            ShoppingListItemORM(
                search_query=search_query.strip() if search_query else None,
                title=product.title.strip(),
                price=product.price,
                source=product.source,
                link=product.link,
                redirect_link=product.redirect_link,
                thumbnail=product.thumbnail,
                rating=product.rating,
                reviews=product.reviews,
                quantity=max(1, int(quantity or 1)),
            )
        )
        row.updated_at = func.now()
        session.flush()
        session.refresh(row)
        return _to_model(row)


def remove_shopping_list_item(
    list_id: int,
    item_id: int,
    *,
    owner: Optional[str] = None,
) -> ShoppingList:
    with session_scope() as session:
        row = _get_row(session, list_id, owner)
        target = next((item for item in row.items if item.id == item_id), None)
        if target is None:
            raise ValueError(f"Shopping list item {item_id} not found")
        row.items.remove(target)
        row.updated_at = func.now()
        session.flush()
        session.refresh(row)
        return _to_model(row)


def replace_meal_suggestions(
    list_id: int,
    meals: Sequence[MealSuggestion],
    *,
    owner: Optional[str] = None,
) -> ShoppingList:
    """Overwrite the list's meal suggestions in full; there is no merge."""

    payload = [meal.to_payload() for meal in meals]
    with session_scope() as session:
        row = _get_row(session, list_id, owner)
        row.meal_suggestions = payload
        row.updated_at = func.now()
        session.flush()
        session.refresh(row)
        return _to_model(row)


__all__ = [
    "DEFAULT_OWNER",
    "add_shopping_list_item",
    "create_shopping_list",
    "get_shopping_list",
    "list_shopping_lists",
    "remove_shopping_list_item",
    "replace_meal_suggestions",
]
