"""Meal suggestion pipeline: prompt building, reply parsing and orchestration."""

from swipechef.meals.errors import (
    ApiRequestError,
    EmptySelectionError,
    GenerationUnavailableError,
    MealSuggestionError,
    ShoppingListNotFoundError,
    UnparseableResponseError,
)
from swipechef.meals.parser import GenerativeResponseParser, parse_meal_suggestions
from swipechef.meals.prompt import GenerationRequest, MealSuggestionRequestBuilder

__all__ = [
    "ApiRequestError",
    "EmptySelectionError",
    "GenerationRequest",
    "GenerationUnavailableError",
    "GenerativeResponseParser",
    "MealSuggestionError",
    "MealSuggestionRequestBuilder",
    "ShoppingListNotFoundError",
    "UnparseableResponseError",
    "parse_meal_suggestions",
]
