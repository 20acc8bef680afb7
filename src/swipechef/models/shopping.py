"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from swipechef.models.meals import MealSuggestion

DEFAULT_LIST_NAME = "My Shopping List"


class Product(BaseModel):
    """Snapshot of a product search result saved onto a list item."""

    title: str = Field(min_length=1, max_length=500)
    price: Optional[float] = Field(default=None, ge=0)
    source: Optional[str] = Field(default=None, max_length=255)
    link: Optional[str] = Field(default=None, max_length=2048)
    redirect_link: Optional[str] = Field(default=None, max_length=2048)
    thumbnail: Optional[str] = Field(default=None, max_length=2048)
    rating: Optional[float] = Field(default=None, ge=0)
    reviews: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True)


class ShoppingListItem(BaseModel):
    """Single product entry on a shopping list."""

    id: int
    search_query: Optional[str] = Field(default=None, alias="searchQuery")
    product: Product
    quantity: int = Field(default=1, ge=1)
    added_at: datetime = Field(alias="addedAt")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ShoppingList(BaseModel):
    """Named shopping list with its items and latest meal suggestions."""

    id: int
    owner: str
    name: str = Field(default=DEFAULT_LIST_NAME)
    items: list[ShoppingListItem] = Field(default_factory=list)
    meal_suggestions: list[MealSuggestion] = Field(default_factory=list, alias="mealSuggestions")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


__all__ = ["DEFAULT_LIST_NAME", "Product", "ShoppingList", "ShoppingListItem"]
