"""Meal suggestion orchestration tests."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

import pytest

from swipechef.llm.interface import StaticTextClient
from swipechef.meals.errors import (
    EmptySelectionError,
    GenerationUnavailableError,
    UnparseableResponseError,
)
from swipechef.meals.orchestrator import MealSuggestionOrchestrator
from swipechef.models.shopping import ShoppingList


class RecordingWriter:
    """In-memory stand-in for the shopping list store."""

    def __init__(self) -> None:
        self.calls = []
        self.stored = {}
        self._lock = threading.Lock()

    def __call__(self, list_id, meals):
        with self._lock:
            self.calls.append((list_id, list(meals)))
            self.stored[list_id] = list(meals)
        now = datetime.now(timezone.utc)
        return ShoppingList(
            id=list_id,
            owner="default",
            meal_suggestions=list(meals),
            created_at=now,
            updated_at=now,
        )


class FailingClient:
    provider = "failing"

    def __init__(self, exc: Exception) -> None:
        self._exc = exc
        self.calls = 0

    def generate(self, request, *, timeout=None):
        self.calls += 1
        raise self._exc


def test_empty_selection_never_calls_the_generator():
    generator = StaticTextClient("[]")
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(generator=generator, writer=writer)

    with pytest.raises(EmptySelectionError):
        orchestrator.generate(1, [])

    assert generator.requests == []
    assert writer.calls == []


def test_generate_persists_once_and_returns_meals_in_order(meal_payloads, fenced_reply):
    generator = StaticTextClient(fenced_reply)
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(generator=generator, writer=writer)

    meals = orchestrator.generate(7, ["milk", "eggs"])

    assert [meal.name for meal in meals] == [entry["name"] for entry in meal_payloads]
    assert len(generator.requests) == 1
    assert generator.requests[0].ingredients == ("milk", "eggs")
    assert len(writer.calls) == 1
    list_id, written = writer.calls[0]
    assert list_id == 7
    assert written == meals


def test_suggest_does_not_persist(fenced_reply):
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(
        generator=StaticTextClient(fenced_reply), writer=writer
    )

    meals = orchestrator.suggest(["milk"])

    assert len(meals) == 3
    assert writer.calls == []


def test_unavailable_generator_propagates_and_skips_write():
    generator = FailingClient(GenerationUnavailableError())
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(generator=generator, writer=writer)

    with pytest.raises(GenerationUnavailableError):
        orchestrator.generate(1, ["milk"])

    assert generator.calls == 1
    assert writer.calls == []


def test_unexpected_generator_failure_is_reported_as_unavailable():
    generator = FailingClient(RuntimeError("socket closed"))
    orchestrator = MealSuggestionOrchestrator(generator=generator, writer=RecordingWriter())

    with pytest.raises(GenerationUnavailableError) as excinfo:
        orchestrator.suggest(["milk"])

    assert isinstance(excinfo.value.cause, RuntimeError)


def test_unparseable_reply_is_not_persisted():
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(
        generator=StaticTextClient("Sorry, no recipes today."), writer=writer
    )

    with pytest.raises(UnparseableResponseError):
        orchestrator.generate(1, ["milk"])

    assert writer.calls == []


def test_lenient_mode_keeps_valid_meals(meal_payloads):
    reply = json.dumps([meal_payloads[0], {"name": "Broken"}])
    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(
        generator=StaticTextClient(reply), writer=writer, strict=False
    )

    meals = orchestrator.generate(3, ["eggs"])

    assert [meal.name for meal in meals] == ["Shakshuka"]
    assert writer.stored[3] == meals


def test_request_timeout_overrides_default(fenced_reply):
    seen = []

    class RecordingClient(StaticTextClient):
        def generate(self, request, *, timeout=None):
            seen.append(timeout)
            return super().generate(request, timeout=timeout)

    orchestrator = MealSuggestionOrchestrator(
        generator=RecordingClient(fenced_reply), writer=RecordingWriter(), timeout=30.0
    )

    orchestrator.suggest(["milk"])
    orchestrator.suggest(["milk"], timeout=5.0)

    assert seen == [30.0, 5.0]


def test_concurrent_generations_leave_last_write(meal_payloads):
    first_reply = json.dumps([meal_payloads[0]])
    second_reply = json.dumps([meal_payloads[1]])
    release_first = threading.Event()
    second_done = threading.Event()

    class GatedClient:
        provider = "gated"

        def generate(self, request, *, timeout=None):
            if request.ingredients == ("eggs",):
                release_first.wait(timeout=5)
                return first_reply
            return second_reply

    writer = RecordingWriter()
    orchestrator = MealSuggestionOrchestrator(generator=GatedClient(), writer=writer)
    results = {}

    def run(key, kept, done=None):
        results[key] = orchestrator.generate(42, kept)
        if done is not None:
            done.set()

    first = threading.Thread(target=run, args=("first", ["eggs"]))
    second = threading.Thread(target=run, args=("second", ["milk"], second_done))
    first.start()
    second.start()
    assert second_done.wait(timeout=5)
    release_first.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert [call[1][0].name for call in writer.calls] == ["French Toast", "Shakshuka"]
    assert writer.stored[42] == results["first"]
