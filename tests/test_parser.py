"""Model reply parsing tests."""

from __future__ import annotations

import json
import logging

import pytest

from swipechef.meals.errors import UnparseableResponseError
from swipechef.meals.parser import (
    GenerativeResponseParser,
    ParseErr,
    ParseOk,
    parse_meal_suggestions,
    preview,
    strip_fences,
    validate_meals,
)

TACOS_REPLY = (
    "```json\n"
    '[{"name":"Tacos","ingredients":["tortilla"],"instructions":"Warm and fill.",'
    '"nutritionFacts":{"calories":250,"protein":"10g","carbs":"30g","fat":"9g","fiber":"4g"},'
    '"prepTime":"10 minutes","servings":2}]\n'
    "```"
)


def test_labeled_fence_yields_single_taco():
    items = GenerativeResponseParser().parse(TACOS_REPLY)

    assert len(items) == 1
    assert items[0]["name"] == "Tacos"


def test_array_after_prose_is_accepted_without_schema_check():
    items = GenerativeResponseParser().parse("Sure! Here is your list: [1,2,3]")

    assert items == [1, 2, 3]


def test_bare_fence_is_stripped():
    assert GenerativeResponseParser().parse('```\n[{"name": "Soup"}]\n```') == [{"name": "Soup"}]


def test_garbage_text_is_unparseable():
    with pytest.raises(UnparseableResponseError) as excinfo:
        GenerativeResponseParser().parse("I'm sorry, I can't help with that.")

    assert excinfo.value.kind == "syntax"
    assert "can't help" in excinfo.value.raw_text


def test_truncated_json_is_not_repaired():
    outcome = GenerativeResponseParser().try_parse('[{"name": "Tacos", "ingredients": [')

    assert isinstance(outcome, ParseErr)
    assert outcome.kind == "syntax"


def test_object_instead_of_array_is_rejected():
    outcome = GenerativeResponseParser().try_parse('{"meals": []}')

    assert isinstance(outcome, ParseErr)
    assert outcome.kind == "not_array"
    assert isinstance(outcome.to_exception(), UnparseableResponseError)


def test_try_parse_success_is_tagged():
    outcome = GenerativeResponseParser().try_parse("[]")

    assert isinstance(outcome, ParseOk)
    assert outcome.ok is True
    assert outcome.items == []


def test_strip_fences_leaves_plain_text_alone():
    assert strip_fences('  [{"a": 1}]  ') == '[{"a": 1}]'


def test_parse_meal_suggestions_preserves_order(meal_payloads, fenced_reply):
    meals = parse_meal_suggestions(fenced_reply)

    assert [meal.name for meal in meals] == [entry["name"] for entry in meal_payloads]
    assert meals[0].nutrition_facts.calories == pytest.approx(320)
    assert meals[0].prep_time == "25 minutes"


def test_numeric_amounts_are_coerced_to_text(meal_payloads):
    entry = dict(meal_payloads[0])
    entry["prepTime"] = 25
    entry["nutritionFacts"] = dict(entry["nutritionFacts"], protein=18)

    meal = validate_meals([entry])[0]

    assert meal.prep_time == "25"
    assert meal.nutrition_facts.protein == "18"


def test_strict_validation_rejects_any_bad_entry(meal_payloads):
    items = [meal_payloads[0], {"name": "Mystery"}]

    with pytest.raises(UnparseableResponseError) as excinfo:
        validate_meals(items, raw_text=json.dumps(items))

    assert excinfo.value.kind == "schema"


def test_lenient_validation_drops_bad_entries(meal_payloads, caplog):
    items = [1, meal_payloads[1], {"name": "Mystery"}]

    with caplog.at_level(logging.WARNING, logger="swipechef.meals.parser"):
        meals = validate_meals(items, strict=False)

    assert [meal.name for meal in meals] == ["French Toast"]
    assert "Dropping meal suggestion entry 0" in caplog.text


def test_preview_is_single_line_and_bounded():
    text = "line one\nline two " + "x" * 600

    rendered = preview(text, limit=50)

    assert "\n" not in rendered
    assert rendered.endswith("...(truncated)")
    assert len(rendered) == 50 + len("...(truncated)")


def test_strict_validation_requires_ingredients(meal_payloads):
    entry = dict(meal_payloads[0])
    del entry["ingredients"]

    with pytest.raises(UnparseableResponseError) as excinfo:
        validate_meals([entry], raw_text=json.dumps([entry]))

    assert excinfo.value.kind == "schema"


def test_whole_calories_keep_their_number_type(meal_payloads):
    whole = validate_meals([meal_payloads[0]])[0]
    fractional = validate_meals(
        [dict(meal_payloads[0], nutritionFacts=dict(meal_payloads[0]["nutritionFacts"], calories=320.5))]
    )[0]

    assert whole.to_payload()["nutritionFacts"]["calories"] == 320
    assert isinstance(whole.to_payload()["nutritionFacts"]["calories"], int)
    assert fractional.to_payload()["nutritionFacts"]["calories"] == pytest.approx(320.5)
