"""Client-side ingredient selection session for a single shopping list."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from swipechef.deck import DragThreshold, IngredientDeck, SwipeDirection, deck_from_shopping_list
from swipechef.emoji import resolve_emoji
from swipechef.meals.errors import EmptySelectionError
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import ShoppingList

logger = logging.getLogger(__name__)


class ShoppingListApi(Protocol):
    def get_shopping_list(self, list_id: int, *, token: Optional[str] = None) -> ShoppingList:
        ...

    def generate_meals_for_list(
        self,
        list_id: int,
        items: Sequence[str],
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[MealSuggestion]:
        ...


class IngredientSelectorSession:
    """Load a list, triage its items on a deck and request meals for what was kept.

    The latest kept selection is tracked through the deck's selection listener.
    A failed generation leaves the deck and the previous meals untouched, so the
    user can simply try again.
    """

    def __init__(
        self,
        api: ShoppingListApi,
        list_id: int,
        *,
        token: Optional[str] = None,
        threshold: Optional[DragThreshold] = None,
    ) -> None:
        self._api = api
        self._list_id = list_id
        self._token = token
        self._threshold = threshold
        self._deck: Optional[IngredientDeck] = None
        self._shopping_list: Optional[ShoppingList] = None
        self._selected: Tuple[str, ...] = ()
        self._meals: List[MealSuggestion] = []
        self._generating = False

    @property
    def list_id(self) -> int:
        return self._list_id

    @property
    def deck(self) -> IngredientDeck:
        if self._deck is None:
            raise RuntimeError("Selector session has not been opened")
        return self._deck

    @property
    def shopping_list(self) -> Optional[ShoppingList]:
        return self._shopping_list

    @property
    def selected(self) -> Tuple[str, ...]:
        return self._selected

    @property
    def meals(self) -> List[MealSuggestion]:
        return list(self._meals)

    @property
    def can_generate(self) -> bool:
        return bool(self._selected) and not self._generating

    def open(self) -> IngredientDeck:
        """Fetch the list and seed a fresh deck from its item titles."""

        shopping_list = self._api.get_shopping_list(self._list_id, token=self._token)
        self._shopping_list = shopping_list
        self._meals = list(shopping_list.meal_suggestions)
        self._selected = ()
        self._deck = deck_from_shopping_list(
            shopping_list,
            on_selection_changed=self._on_selection_changed,
            threshold=self._threshold,
        )
        logger.debug(
            "Opened selector for list %s with %s ingredient(s)",
            self._list_id,
            len(self._deck.initial),
        )
        return self._deck

    def card(self) -> Optional[Tuple[str, str]]:
        """Return the top card as ``(emoji, name)``, or ``None`` once the deck is exhausted."""

        top = self.deck.top
        if top is None:
            return None
        return resolve_emoji(top), top

    def keep(self, name: str) -> None:
        self.deck.swipe(name, SwipeDirection.RIGHT)

    def discard(self, name: str) -> None:
        self.deck.swipe(name, SwipeDirection.LEFT)

    def reset(self) -> None:
        self.deck.reset()

    def generate(self, *, timeout: Optional[float] = None) -> List[MealSuggestion]:
        if not self._selected:
            raise EmptySelectionError()
        if self._generating:
            raise RuntimeError("A meal suggestion request is already in flight")

        self._generating = True
        try:
            meals = self._api.generate_meals_for_list(
                self._list_id,
                self._selected,
                token=self._token,
                timeout=timeout,
            )
        finally:
            self._generating = False

        self._meals = list(meals)
        return self.meals

    def _on_selection_changed(self, kept: Tuple[str, ...]) -> None:
        self._selected = kept


__all__ = ["IngredientSelectorSession", "ShoppingListApi"]
