"""Coordinate prompt building, generation, parsing and persistence of meal suggestions."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from swipechef import metrics
from swipechef.llm.interface import GenerativeTextClient
from swipechef.meals.errors import GenerationUnavailableError, UnparseableResponseError
from swipechef.meals.parser import GenerativeResponseParser, ParseErr, preview, validate_meals
from swipechef.meals.prompt import MealSuggestionRequestBuilder
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import ShoppingList

# Overwrites the list's suggestions in full and returns the updated list.
MealSuggestionWriter = Callable[[int, Sequence[MealSuggestion]], ShoppingList]

logger = logging.getLogger(__name__)


class MealSuggestionOrchestrator:
    """Run one suggestion round: one external call, and at most one write.

    Nothing is retried automatically. Concurrent rounds for the same list are not
    coordinated; whichever persists last wins.
    """

    def __init__(
        self,
        *,
        generator: GenerativeTextClient,
        writer: MealSuggestionWriter,
        builder: Optional[MealSuggestionRequestBuilder] = None,
        parser: Optional[GenerativeResponseParser] = None,
        strict: bool = True,
        timeout: Optional[float] = None,
    ) -> None:
        self._generator = generator
        self._writer = writer
        self._builder = builder or MealSuggestionRequestBuilder()
        self._parser = parser or GenerativeResponseParser()
        self._strict = strict
        self._timeout = timeout

    def suggest(
        self,
        kept_ingredients: Sequence[str],
        *,
        timeout: Optional[float] = None,
    ) -> List[MealSuggestion]:
        """Generate suggestions without persisting them."""

        request = self._builder.build(kept_ingredients)
        effective_timeout = self._timeout if timeout is None else timeout
        provider = getattr(self._generator, "provider", "unknown")
        logger.info(
            "Requesting %s meal suggestion(s) from %s for %s ingredient(s)",
            request.expected_count,
            provider,
            len(request.ingredients),
        )

        try:
            raw_text = self._generator.generate(request, timeout=effective_timeout)
        except GenerationUnavailableError:
            metrics.MEAL_GENERATIONS.labels(outcome="unavailable").inc()
            raise
        except Exception as exc:
            metrics.MEAL_GENERATIONS.labels(outcome="unavailable").inc()
            logger.exception("Generative provider %s failed unexpectedly", provider)
            raise GenerationUnavailableError(cause=exc) from exc

        outcome = self._parser.try_parse(raw_text)
        if isinstance(outcome, ParseErr):
            self._log_unparseable(outcome.kind, outcome.diagnostic, raw_text)
            metrics.MEAL_GENERATIONS.labels(outcome="unparseable").inc()
            raise outcome.to_exception()

        try:
            meals = validate_meals(outcome.items, raw_text=raw_text, strict=self._strict)
        except UnparseableResponseError as exc:
            self._log_unparseable(exc.kind, exc.message, raw_text)
            metrics.MEAL_GENERATIONS.labels(outcome="unparseable").inc()
            raise

        if len(meals) != request.expected_count:
            logger.info(
                "Model returned %s meal(s); %s were requested",
                len(meals),
                request.expected_count,
            )
        metrics.MEAL_GENERATIONS.labels(outcome="succeeded").inc()
        return meals

    def generate(
        self,
        list_id: int,
        kept_ingredients: Sequence[str],
        *,
        timeout: Optional[float] = None,
    ) -> List[MealSuggestion]:
        """Generate suggestions and replace the list's stored ones with them."""

        meals = self.suggest(kept_ingredients, timeout=timeout)
        self.persist(list_id, meals)
        return meals

    def persist(self, list_id: int, meals: Sequence[MealSuggestion]) -> ShoppingList:
        updated = self._writer(list_id, list(meals))
        logger.info("Stored %s meal suggestion(s) on shopping list %s", len(meals), list_id)
        return updated

    @staticmethod
    def _log_unparseable(kind: str, diagnostic: str, raw_text: str) -> None:
        logger.warning(
            "Unparseable meal suggestion response kind=%s diagnostic=%s raw=%s",
            kind,
            diagnostic,
            preview(raw_text),
        )


__all__ = ["MealSuggestionOrchestrator", "MealSuggestionWriter"]
