"""Command-line interface for SwipeChef."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from swipechef.api_client import SwipeChefApiClient
from swipechef.config import get_settings
from swipechef.deck import DragThreshold
from swipechef.meals.errors import MealSuggestionError
from swipechef.meals.parser import parse_meal_suggestions
from swipechef.models.meals import MealSuggestion
from swipechef.selector import IngredientSelectorSession

app = typer.Typer(help="SwipeChef meal suggestion commands.")


def _dump_meals(meals: List[MealSuggestion], pretty: bool) -> str:
    payload = [meal.to_payload() for meal in meals]
    return json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False)


def _api_client(base_url: Optional[str]) -> SwipeChefApiClient:
    return SwipeChefApiClient(base_url or get_settings().api_base_url)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API under uvicorn."""

    from swipechef.server.run import serve as run_server

    run_server(host, port, reload=reload)


@app.command()
def parse(
    reply_path: Path = typer.Argument(..., help="File holding a raw model reply."),
    lenient: bool = typer.Option(
        False, "--lenient", help="Drop malformed meals instead of failing."
    ),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Parse a saved model reply into meal suggestions and print them as JSON.
    """

    raw = reply_path.read_text(encoding="utf-8")
    try:
        meals = parse_meal_suggestions(raw, strict=not lenient)
    except MealSuggestionError as exc:
        typer.secho(f"Unable to parse reply: {exc.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(_dump_meals(meals, pretty))


@app.command()
def suggest(
    items: List[str] = typer.Argument(..., help="Ingredients to cook with."),
    token: Optional[str] = typer.Option(None, "--token", envvar="SWIPECHEF_API_TOKEN"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API base URL."),
) -> None:
    """Ask the API for meal suggestions without storing them."""

    try:
        meals = _api_client(base_url).suggest_meals(items, token=token)
    except MealSuggestionError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(_dump_meals(meals, True))


@app.command()
def select(
    list_id: int = typer.Argument(..., help="Shopping list to pick ingredients from."),
    token: Optional[str] = typer.Option(None, "--token", envvar="SWIPECHEF_API_TOKEN"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API base URL."),
) -> None:
    """
    Swipe through a list's items, then generate meals from the ones kept.

    Answer ``y`` to keep a card, ``n`` to discard it, ``r`` to start over and
    ``q`` to stop swiping early.
    """

    threshold = DragThreshold(get_settings().swipe_threshold)
    session = IngredientSelectorSession(
        _api_client(base_url), list_id, token=token, threshold=threshold
    )
    try:
        deck = session.open()
    except MealSuggestionError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if not deck.initial:
        typer.echo("This list has no items to choose from.")
        raise typer.Exit(code=0)

    while True:
        card = session.card()
        if card is None:
            break
        emoji, name = card
        answer = typer.prompt(f"{emoji}  {name} [y/n/r/q]", default="y").strip().lower()
        if answer.startswith("y"):
            session.keep(name)
        elif answer.startswith("n"):
            session.discard(name)
        elif answer.startswith("r"):
            session.reset()
        elif answer.startswith("q"):
            break

    if not session.can_generate:
        typer.echo("Nothing kept; no meals requested.")
        raise typer.Exit(code=0)

    typer.echo(f"Selected: {', '.join(session.selected)}")
    try:
        meals = session.generate()
    except MealSuggestionError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    for meal in meals:
        typer.echo(f"- {meal.name} ({meal.prep_time}, serves {meal.servings})")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``swipechef`` console script."""
    app(prog_name="swipechef", args=argv)


if __name__ == "__main__":
    main()
