"""Shared helpers for integration tests."""

from __future__ import annotations

from swipechef.config import get_settings
from swipechef.llm.interface import StaticTextClient
from swipechef.meals.orchestrator import MealSuggestionOrchestrator
from swipechef.server import deps


def auth_headers() -> dict[str, str]:
    token = get_settings().api_token
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def use_generator(app, generator) -> None:
    """Route meal generation through ``generator`` while keeping the real store."""

    writer = deps.get_meal_suggestion_writer()
    app.dependency_overrides[deps.get_meal_orchestrator] = lambda: MealSuggestionOrchestrator(
        generator=generator,
        writer=writer,
    )


def use_reply(app, reply: str) -> StaticTextClient:
    generator = StaticTextClient(reply)
    use_generator(app, generator)
    return generator
