"""Pydantic models defining shared data contracts."""

from swipechef.models.meals import MealSuggestion, NutritionFacts
from swipechef.models.shopping import DEFAULT_LIST_NAME, Product, ShoppingList, ShoppingListItem

__all__ = [
    "DEFAULT_LIST_NAME",
    "MealSuggestion",
    "NutritionFacts",
    "Product",
    "ShoppingList",
    "ShoppingListItem",
]
