"""Failure taxonomy for the meal suggestion pipeline."""

from __future__ import annotations

from typing import Optional


class MealSuggestionError(Exception):
    """Base class for meal suggestion failures; ``http_status`` guides the API layer."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class EmptySelectionError(MealSuggestionError, ValueError):
    """No ingredient was kept, so there is nothing to generate from."""

    http_status = 400

    def __init__(self, message: str = "Select at least one ingredient") -> None:
        super().__init__(message)


class GenerationUnavailableError(MealSuggestionError):
    """The generative text service failed or timed out. Safe to retry manually."""

    http_status = 502
    retryable = True

    def __init__(
        self,
        message: str = "Meal generation is currently unavailable",
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause


class UnparseableResponseError(MealSuggestionError):
    """The model reply could not be coerced into meal suggestions.

    ``raw_text`` is kept for diagnostics and must only ever reach the logs.
    """

    http_status = 500

    def __init__(self, message: str, *, raw_text: str, kind: str = "syntax") -> None:
        super().__init__(message)
        self.raw_text = raw_text
        self.kind = kind


class ApiRequestError(MealSuggestionError):
    """The SwipeChef API could not be reached or refused the request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShoppingListNotFoundError(MealSuggestionError, LookupError):
    http_status = 404

    def __init__(self, list_id: int) -> None:
        super().__init__(f"Shopping list {list_id} not found")
        self.list_id = list_id


__all__ = [
    "ApiRequestError",
    "EmptySelectionError",
    "GenerationUnavailableError",
    "MealSuggestionError",
    "ShoppingListNotFoundError",
    "UnparseableResponseError",
]
