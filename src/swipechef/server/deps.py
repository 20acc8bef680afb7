"""Dependency definitions for the SwipeChef API server."""

from __future__ import annotations

from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, Request, status

from swipechef.config import Settings, get_settings
from swipechef.db.shopping_lists import (
    add_shopping_list_item,
    create_shopping_list,
    get_shopping_list,
    list_shopping_lists,
    remove_shopping_list_item,
    replace_meal_suggestions,
)
from swipechef.llm.client import build_generative_client
from swipechef.meals.orchestrator import MealSuggestionOrchestrator
from swipechef.meals.prompt import GenerationConfig, MealSuggestionRequestBuilder
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import ShoppingList

ShoppingListsProvider = Callable[[Optional[str]], List[ShoppingList]]
ShoppingListFetcher = Callable[[int], Optional[ShoppingList]]
ShoppingListCreator = Callable[[dict], ShoppingList]
ShoppingListItemAdder = Callable[[int, dict], ShoppingList]
ShoppingListItemRemover = Callable[[int, int], ShoppingList]
MealSuggestionWriter = Callable[[int, List[MealSuggestion]], ShoppingList]


def get_shopping_lists_provider() -> ShoppingListsProvider:
    return lambda owner=None: list_shopping_lists(owner)


def get_shopping_list_fetcher() -> ShoppingListFetcher:
    return get_shopping_list


def get_shopping_list_creator() -> ShoppingListCreator:
    return lambda payload: create_shopping_list(**payload)


def get_shopping_list_item_adder() -> ShoppingListItemAdder:
    return lambda list_id, payload: add_shopping_list_item(list_id, **payload)


def get_shopping_list_item_remover() -> ShoppingListItemRemover:
    return lambda list_id, item_id: remove_shopping_list_item(list_id, item_id)


def get_meal_suggestion_writer() -> MealSuggestionWriter:
    return lambda list_id, meals: replace_meal_suggestions(list_id, meals)


def build_orchestrator(
    settings: Settings,
    writer: MealSuggestionWriter,
) -> Optional[MealSuggestionOrchestrator]:
    """Assemble the suggestion pipeline from settings; ``None`` when no provider is configured."""

    generator = build_generative_client(settings)
    if generator is None:
        return None
    builder = MealSuggestionRequestBuilder(
        count=settings.meal_count,
        config=GenerationConfig(
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        ),
    )
    return MealSuggestionOrchestrator(
        generator=generator,
        writer=writer,
        builder=builder,
        strict=settings.meal_strict_validation,
        timeout=settings.llm_timeout,
    )


def get_meal_orchestrator(
    settings: Settings = Depends(get_settings),
    writer: MealSuggestionWriter = Depends(get_meal_suggestion_writer),
) -> MealSuggestionOrchestrator:
    orchestrator = build_orchestrator(settings, writer)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Meal generation is not configured",
        )
    return orchestrator


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
