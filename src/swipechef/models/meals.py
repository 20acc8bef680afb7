"""Meal suggestion models."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt, field_validator


def _number_to_text(value: Any) -> Any:
    # Models often answer "protein": 15 where "15g" was asked for.
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class NutritionFacts(BaseModel):
    """Nutrition profile per serving as reported by the model."""

    # Whole numbers stay ints so stored documents round-trip unchanged.
    calories: Union[NonNegativeInt, NonNegativeFloat]
    protein: str
    carbs: str
    fat: str
    fiber: str

    model_config = ConfigDict(frozen=True)

    @field_validator("protein", "carbs", "fat", "fiber", mode="before")
    @classmethod
    def coerce_amounts(cls, value: Any) -> Any:
        return _number_to_text(value)


class MealSuggestion(BaseModel):
    """Single generated recipe attached to a shopping list."""

    name: str = Field(min_length=1)
    ingredients: list[str]
    instructions: str
    nutrition_facts: NutritionFacts = Field(alias="nutritionFacts")
    prep_time: str = Field(alias="prepTime")
    servings: int = Field(ge=1)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("prep_time", mode="before")
    @classmethod
    def coerce_prep_time(cls, value: Any) -> Any:
        return _number_to_text(value)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON document shape stored and served for this meal."""

        return self.model_dump(mode="json", by_alias=True)


__all__ = ["MealSuggestion", "NutritionFacts"]
