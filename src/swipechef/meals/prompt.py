"""Prompt construction for meal suggestion requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

from swipechef.meals.errors import EmptySelectionError

DEFAULT_MEAL_COUNT = 3

MEAL_SCHEMA_EXAMPLE = (
    "[\n"
    "  {\n"
    '    "name": "Meal Name",\n'
    '    "ingredients": ["ingredient 1", "ingredient 2"],\n'
    '    "instructions": "Step by step instructions",\n'
    '    "nutritionFacts": {\n'
    '      "calories": 300,\n'
    '      "protein": "15g",\n'
    '      "carbs": "40g",\n'
    '      "fat": "10g",\n'
    '      "fiber": "5g"\n'
    "    },\n"
    '    "prepTime": "30 minutes",\n'
    '    "servings": 4\n'
    "  }\n"
    "]"
)

MEAL_PROMPT_TEMPLATE = (
    "Given these grocery items: {ingredients}\n\n"
    "Suggest {count} meal recipes that can be made with these ingredients.\n"
    "For each meal, provide:\n"
    "- Name\n"
    "- List of ingredients needed\n"
    "- Brief cooking instructions\n"
    "- Nutrition facts (calories, protein, carbs, fat, fiber)\n"
    "- Prep time\n"
    "- Number of servings\n\n"
    "Return the response as a JSON array of exactly {count} objects with this exact structure:\n"
    "{schema}\n"
    "calories and servings are numbers; every other nutrition value, prepTime and instructions "
    "are strings. Return only the JSON array, without prose."
)


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.2
    top_p: float = 0.8
    top_k: int = 40
    max_tokens: int = 2048


@dataclass(frozen=True)
class GenerationRequest:
    """Instruction sent to the generative text service for one suggestion round."""

    ingredients: Tuple[str, ...]
    prompt: str
    expected_count: int
    config: GenerationConfig = field(default_factory=GenerationConfig)


class MealSuggestionRequestBuilder:
    """Build the meal suggestion prompt for a non-empty ingredient selection."""

    def __init__(
        self,
        *,
        count: int = DEFAULT_MEAL_COUNT,
        config: GenerationConfig | None = None,
    ) -> None:
        if count < 1:
            raise ValueError("Meal count must be at least 1")
        self._count = count
        self._config = config or GenerationConfig()

    def build(self, kept_ingredients: Sequence[str]) -> GenerationRequest:
        ingredients = tuple(
            name.strip() for name in kept_ingredients if isinstance(name, str) and name.strip()
        )
        if not ingredients:
            raise EmptySelectionError()

        prompt = MEAL_PROMPT_TEMPLATE.format(
            ingredients=", ".join(ingredients),
            count=self._count,
            schema=MEAL_SCHEMA_EXAMPLE,
        )
        return GenerationRequest(
            ingredients=ingredients,
            prompt=prompt,
            expected_count=self._count,
            config=self._config,
        )


__all__ = [
    "DEFAULT_MEAL_COUNT",
    "GenerationConfig",
    "GenerationRequest",
    "MEAL_PROMPT_TEMPLATE",
    "MealSuggestionRequestBuilder",
]
