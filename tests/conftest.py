"""Shared pytest fixtures for the SwipeChef test suite."""

from __future__ import annotations

import json
from typing import Dict, Generator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from swipechef.config import get_settings
from swipechef.db.repository import reset_repository_state
from swipechef.server.app import create_app

_PROVIDER_ENV = (
    "SWIPECHEF_API_TOKEN",
    "SWIPECHEF_LLM_PROVIDER",
    "SWIPECHEF_LLM_BASE_URL",
    "SWIPECHEF_LLM_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def meal_payloads() -> List[Dict[str, object]]:
    """Three meal documents in the shape the model is asked to return."""

    return [
        {
            "name": "Shakshuka",
            "ingredients": ["eggs", "tomatoes", "onion"],
            "instructions": "Simmer the sauce, crack in the eggs and cover until set.",
            "nutritionFacts": {
                "calories": 320,
                "protein": "18g",
                "carbs": "20g",
                "fat": "18g",
                "fiber": "5g",
            },
            "prepTime": "25 minutes",
            "servings": 2,
        },
        {
            "name": "French Toast",
            "ingredients": ["milk", "eggs", "bread"],
            "instructions": "Soak the bread in the custard and fry until golden.",
            "nutritionFacts": {
                "calories": 410,
                "protein": "15g",
                "carbs": "52g",
                "fat": "14g",
                "fiber": "2g",
            },
            "prepTime": "15 minutes",
            "servings": 2,
        },
        {
            "name": "Custard",
            "ingredients": ["milk", "eggs", "sugar"],
            "instructions": "Whisk everything together and bake in a water bath.",
            "nutritionFacts": {
                "calories": 220,
                "protein": "9g",
                "carbs": "28g",
                "fat": "8g",
                "fiber": "0g",
            },
            "prepTime": "45 minutes",
            "servings": 4,
        },
    ]


@pytest.fixture()
def fenced_reply(meal_payloads) -> str:
    """Model reply wrapping the meal array in a labeled markdown fence."""

    return "Here you go!\n```json\n" + json.dumps(meal_payloads, indent=2) + "\n```\nEnjoy."


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database and no provider credentials."""

    db_path = tmp_path / "test_swipechef.db"
    monkeypatch.setenv("SWIPECHEF_DATABASE_PATH", str(db_path))
    for key in _PROVIDER_ENV:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("SWIPECHEF_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
