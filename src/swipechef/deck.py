"""Swipe-driven ingredient deck used to pick what goes into meal suggestions.

The deck holds the ingredients still waiting to be triaged (``candidates``) and
the ones the user chose to keep (``kept``). Every ingredient of the initial set
is always in exactly one of candidates, kept or the implicit discard pile.
Selection listeners are called synchronously, in gesture order, with the full
kept sequence after each right swipe and after a reset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from swipechef.models.shopping import ShoppingList

logger = logging.getLogger(__name__)

DEFAULT_SWIPE_THRESHOLD = 100.0

SelectionListener = Callable[[Tuple[str, ...]], None]


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class DeckPhase(str, Enum):
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class StaleIngredientError(LookupError):
    """Raised when a swipe targets an ingredient that is no longer a candidate."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Ingredient '{name}' is not among the remaining candidates")
        self.name = name


@dataclass(frozen=True)
class DragThreshold:
    """Turn a horizontal drag offset into a swipe direction.

    Offsets whose magnitude does not exceed ``distance`` resolve to ``None`` and
    the card springs back.
    """

    distance: float = DEFAULT_SWIPE_THRESHOLD

    def __post_init__(self) -> None:
        if self.distance <= 0:
            raise ValueError("Swipe threshold must be greater than 0")

    def resolve(self, offset: float) -> Optional[SwipeDirection]:
        if offset > self.distance:
            return SwipeDirection.RIGHT
        if offset < -self.distance:
            return SwipeDirection.LEFT
        return None


def _identity(name: str) -> str:
    return name.strip().casefold()


def _dedupe(names: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for raw in names:
        name = (raw or "").strip()
        if not name:
            continue
        key = _identity(name)
        if key in seen:
            continue
        seen.add(key)
        unique.append(name)
    return unique


class IngredientDeck:
    """Ephemeral per-session state machine over a set of ingredient names."""

    def __init__(
        self,
        initial: Iterable[str],
        *,
        on_selection_changed: Optional[SelectionListener] = None,
        threshold: Optional[DragThreshold] = None,
    ) -> None:
        self._initial: Tuple[str, ...] = tuple(_dedupe(initial))
        self._candidates: List[str] = list(self._initial)
        self._kept: List[str] = []
        self._listeners: List[SelectionListener] = []
        self._threshold = threshold or DragThreshold()
        if on_selection_changed is not None:
            self._listeners.append(on_selection_changed)

    @property
    def initial(self) -> Tuple[str, ...]:
        return self._initial

    @property
    def candidates(self) -> Tuple[str, ...]:
        return tuple(self._candidates)

    @property
    def kept(self) -> Tuple[str, ...]:
        return tuple(self._kept)

    @property
    def discarded(self) -> Tuple[str, ...]:
        """Names swiped left, derived from what is neither candidate nor kept."""

        remaining = {_identity(name) for name in self._candidates}
        remaining.update(_identity(name) for name in self._kept)
        return tuple(name for name in self._initial if _identity(name) not in remaining)

    @property
    def phase(self) -> DeckPhase:
        return DeckPhase.ACTIVE if self._candidates else DeckPhase.EXHAUSTED

    @property
    def is_exhausted(self) -> bool:
        return not self._candidates

    @property
    def top(self) -> Optional[str]:
        return self._candidates[0] if self._candidates else None

    @property
    def threshold(self) -> DragThreshold:
        return self._threshold

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register a selection listener and return a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def swipe(self, name: str, direction: SwipeDirection | str) -> None:
        resolved = SwipeDirection(direction)
        index = self._index_of(name)
        if index is None:
            raise StaleIngredientError(name)

        card = self._candidates.pop(index)
        if resolved is SwipeDirection.RIGHT:
            self._kept.append(card)
            logger.debug("Kept ingredient %s (kept=%s)", card, len(self._kept))
            self._notify()
        else:
            logger.debug("Discarded ingredient %s", card)

    def drag_end(self, name: str, offset: float) -> Optional[SwipeDirection]:
        """Apply a finished drag gesture; small drags leave the deck untouched."""

        direction = self._threshold.resolve(offset)
        if direction is None:
            return None
        self.swipe(name, direction)
        return direction

    def reset(self) -> None:
        self._candidates = list(self._initial)
        self._kept = []
        self._notify()

    def _index_of(self, name: str) -> Optional[int]:
        key = _identity(name or "")
        for index, candidate in enumerate(self._candidates):
            if _identity(candidate) == key:
                return index
        return None

    def _notify(self) -> None:
        snapshot = self.kept
        for listener in list(self._listeners):
            listener(snapshot)


def ingredient_names(shopping_list: ShoppingList) -> List[str]:
    """Return the product titles of a shopping list in item order."""

    return [item.product.title for item in shopping_list.items if item.product.title]


def deck_from_shopping_list(
    shopping_list: ShoppingList,
    *,
    on_selection_changed: Optional[SelectionListener] = None,
    threshold: Optional[DragThreshold] = None,
) -> IngredientDeck:
    """Seed a fresh deck from a shopping list's item titles."""

    return IngredientDeck(
        ingredient_names(shopping_list),
        on_selection_changed=on_selection_changed,
        threshold=threshold,
    )


__all__ = [
    "DEFAULT_SWIPE_THRESHOLD",
    "DeckPhase",
    "DragThreshold",
    "IngredientDeck",
    "SelectionListener",
    "StaleIngredientError",
    "SwipeDirection",
    "deck_from_shopping_list",
    "ingredient_names",
]
