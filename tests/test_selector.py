"""Selector session and API client tests against the in-process app."""

from __future__ import annotations

import httpx
import pytest

from swipechef.api_client import SwipeChefApiClient, generation_http_timeout
from swipechef.meals.errors import (
    ApiRequestError,
    EmptySelectionError,
    GenerationUnavailableError,
    ShoppingListNotFoundError,
    UnparseableResponseError,
)
from swipechef.selector import IngredientSelectorSession
from tests.integration.utils import use_generator, use_reply


class UnavailableClient:
    provider = "down"

    def generate(self, request, *, timeout=None):
        raise GenerationUnavailableError()


@pytest.fixture()
def api(client) -> SwipeChefApiClient:
    return SwipeChefApiClient("http://testserver", client=client)


@pytest.fixture()
def list_id(client) -> int:
    list_id = client.post("/shopping-lists", json={"name": "Brunch"}).json()["id"]
    for title in ("Whole Milk", "Eggs", "Sourdough Bread"):
        client.post(f"/shopping-lists/{list_id}/items", json={"product": {"title": title}})
    return list_id


def test_open_seeds_deck_from_list_items(api, list_id):
    session = IngredientSelectorSession(api, list_id)

    deck = session.open()

    assert deck.candidates == ("Whole Milk", "Eggs", "Sourdough Bread")
    assert session.card() == ("🥛", "Whole Milk")
    assert session.shopping_list is not None
    assert session.shopping_list.name == "Brunch"


def test_generate_is_blocked_until_something_is_kept(app, api, list_id):
    generator = use_reply(app, "[]")
    session = IngredientSelectorSession(api, list_id)
    session.open()
    session.discard("Whole Milk")

    assert session.can_generate is False
    with pytest.raises(EmptySelectionError):
        session.generate()
    assert generator.requests == []


def test_generate_sends_kept_ingredients_and_stores_meals(app, client, api, list_id, fenced_reply):
    generator = use_reply(app, fenced_reply)
    session = IngredientSelectorSession(api, list_id)
    session.open()
    session.keep("Whole Milk")
    session.discard("Eggs")
    session.keep("Sourdough Bread")

    meals = session.generate()

    assert generator.requests[0].ingredients == ("Whole Milk", "Sourdough Bread")
    assert [meal.name for meal in meals] == ["Shakshuka", "French Toast", "Custard"]
    assert session.meals == meals
    stored = client.get(f"/shopping-lists/{list_id}").json()["mealSuggestions"]
    assert len(stored) == 3


def test_failed_generation_leaves_session_state_unchanged(app, api, list_id):
    use_generator(app, UnavailableClient())
    session = IngredientSelectorSession(api, list_id)
    session.open()
    session.keep("Eggs")
    before = (session.deck.candidates, session.deck.kept, session.selected)

    with pytest.raises(GenerationUnavailableError):
        session.generate()

    assert (session.deck.candidates, session.deck.kept, session.selected) == before
    assert session.meals == []
    assert session.can_generate is True


def test_unparseable_reply_surfaces_as_error(app, api, list_id):
    use_reply(app, "not json at all")
    session = IngredientSelectorSession(api, list_id)
    session.open()
    session.keep("Eggs")

    with pytest.raises(UnparseableResponseError):
        session.generate()


def test_reset_clears_selection(api, list_id):
    session = IngredientSelectorSession(api, list_id)
    session.open()
    session.keep("Eggs")

    session.reset()

    assert session.selected == ()
    assert session.deck.candidates == ("Whole Milk", "Eggs", "Sourdough Bread")


def test_missing_list_raises_not_found(api):
    with pytest.raises(ShoppingListNotFoundError):
        IngredientSelectorSession(api, 9876).open()


def test_api_client_sends_bearer_token_per_call(monkeypatch):
    captured = {}

    class DummyClient:
        def __init__(self, *args, **kwargs):
            captured["base_url"] = kwargs.get("base_url")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def request(self, method, path, json=None, headers=None):
            captured["path"] = path
            captured["headers"] = headers
            return httpx.Response(
                200,
                json={"meals": []},
                request=httpx.Request(method, f"http://api.local{path}"),
            )

    monkeypatch.setattr("swipechef.api_client.httpx.Client", DummyClient)

    meals = SwipeChefApiClient("http://api.local/").suggest_meals(["rice"], token="tok-1")

    assert meals == []
    assert captured["base_url"] == "http://api.local"
    assert captured["path"] == "/meal-suggestions"
    assert captured["headers"]["Authorization"] == "Bearer tok-1"


def test_api_client_maps_transport_errors(monkeypatch):
    class BrokenClient:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def request(self, *args, **kwargs):
            raise httpx.ConnectError("connection refused")

    monkeypatch.setattr("swipechef.api_client.httpx.Client", BrokenClient)

    with pytest.raises(GenerationUnavailableError):
        SwipeChefApiClient("http://api.local").suggest_meals(["rice"])


def _mock_api(handler) -> SwipeChefApiClient:
    transport = httpx.MockTransport(handler)
    return SwipeChefApiClient(
        "http://api.local",
        client=httpx.Client(base_url="http://api.local", transport=transport),
    )


def test_api_client_reports_rejected_credentials():
    api = _mock_api(lambda request: httpx.Response(401, json={"detail": "Unauthorized"}))

    with pytest.raises(ApiRequestError) as excinfo:
        api.suggest_meals(["rice"])

    assert excinfo.value.status_code == 401
    assert "API token" in excinfo.value.message


def test_api_client_reports_other_client_errors():
    api = _mock_api(
        lambda request: httpx.Response(422, json={"detail": "timeout must be at most 120"})
    )

    with pytest.raises(ApiRequestError) as excinfo:
        api.generate_meals_for_list(1, ["rice"], timeout=500)

    assert excinfo.value.status_code == 422
    assert "timeout must be at most 120" in excinfo.value.message


def test_api_client_wraps_unreachable_server_on_list_load(monkeypatch):
    class BrokenClient:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def request(self, *args, **kwargs):
            raise httpx.ConnectError("connection refused")

    monkeypatch.setattr("swipechef.api_client.httpx.Client", BrokenClient)

    with pytest.raises(ApiRequestError) as excinfo:
        SwipeChefApiClient("http://api.local").get_shopping_list(1)

    assert excinfo.value.status_code is None
    assert "Unable to reach" in excinfo.value.message


def test_generation_http_timeout_covers_requested_timeout(monkeypatch):
    timeouts = []

    class RecordingClient:
        def __init__(self, *args, **kwargs):
            timeouts.append(kwargs.get("timeout"))

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def request(self, method, path, json=None, headers=None):
            return httpx.Response(
                200,
                json={"meals": []},
                request=httpx.Request(method, f"http://api.local{path}"),
            )

    monkeypatch.setattr("swipechef.api_client.httpx.Client", RecordingClient)
    api = SwipeChefApiClient("http://api.local")

    api.suggest_meals(["rice"], timeout=110)
    api.suggest_meals(["rice"])

    assert timeouts == [pytest.approx(120.0), pytest.approx(60.0)]
    assert generation_http_timeout(120) > 120
