"""HTTP client for the SwipeChef API.

Credentials are passed to every call rather than read from ambient state, so a
single client can serve several users.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import httpx

from swipechef.meals.errors import (
    ApiRequestError,
    EmptySelectionError,
    GenerationUnavailableError,
    ShoppingListNotFoundError,
    UnparseableResponseError,
)
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import ShoppingList

DEFAULT_TIMEOUT = 10.0
# Used when the caller leaves the generation timeout to the server.
DEFAULT_GENERATION_TIMEOUT = 60.0
# Headroom over the requested generation timeout for parsing and storage.
GENERATION_TIMEOUT_MARGIN = 10.0

logger = logging.getLogger(__name__)


def generation_http_timeout(timeout: Optional[float]) -> float:
    """HTTP budget for a generation call that lets the model use ``timeout`` seconds."""

    if timeout is None:
        return DEFAULT_GENERATION_TIMEOUT
    return float(timeout) + GENERATION_TIMEOUT_MARGIN


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, str) and detail:
        return detail
    return response.text[:200] or response.reason_phrase


class SwipeChefApiClient:
    """Minimal client wrapper around the SwipeChef HTTP API."""

    def __init__(self, base_url: str, *, client: Optional[httpx.Client] = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client

    @staticmethod
    def _headers(token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @contextmanager
    def _session(self, timeout: float) -> Iterator[httpx.Client]:
        if self._client is not None:
            yield self._client
            return
        with httpx.Client(base_url=self._base_url, timeout=timeout) as client:
            yield client

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str],
        json: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> httpx.Response:
        with self._session(timeout) as client:
            return client.request(method, path, json=json, headers=self._headers(token))

    @staticmethod
    def _check_status(response: httpx.Response) -> None:
        status_code = response.status_code
        if status_code < 400:
            return
        if status_code in (401, 403):
            raise ApiRequestError(
                "The SwipeChef API rejected the credentials; check the API token",
                status_code=status_code,
            )
        raise ApiRequestError(
            f"The SwipeChef API answered {status_code}: {_error_detail(response)}",
            status_code=status_code,
        )

    def get_shopping_list(self, list_id: int, *, token: Optional[str] = None) -> ShoppingList:
        try:
            response = self._request("GET", f"/shopping-lists/{list_id}", token=token)
        except httpx.TransportError as exc:
            logger.warning("Loading shopping list %s failed: %s", list_id, exc)
            raise ApiRequestError(f"Unable to reach the SwipeChef API: {exc}") from exc
        if response.status_code == 404:
            raise ShoppingListNotFoundError(list_id)
        self._check_status(response)
        return ShoppingList.model_validate(response.json())

    def suggest_meals(
        self,
        items: Sequence[str],
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[MealSuggestion]:
        """Ask the server for suggestions without storing them."""

        return self._post_generation("/meal-suggestions", items, token=token, timeout=timeout)

    def generate_meals_for_list(
        self,
        list_id: int,
        items: Sequence[str],
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[MealSuggestion]:
        """Generate suggestions and have the server store them on the list."""

        return self._post_generation(
            f"/shopping-lists/{list_id}/meal-suggestions",
            items,
            token=token,
            timeout=timeout,
            list_id=list_id,
        )

    def _post_generation(
        self,
        path: str,
        items: Sequence[str],
        *,
        token: Optional[str],
        timeout: Optional[float],
        list_id: Optional[int] = None,
    ) -> List[MealSuggestion]:
        payload: Dict[str, Any] = {"items": list(items)}
        if timeout is not None:
            payload["timeout"] = timeout
        try:
            response = self._request(
                "POST",
                path,
                token=token,
                json=payload,
                timeout=generation_http_timeout(timeout),
            )
        except httpx.TransportError as exc:
            logger.warning("Meal generation request to %s failed: %s", path, exc)
            raise GenerationUnavailableError(cause=exc) from exc

        status_code = response.status_code
        if status_code == 400:
            raise EmptySelectionError()
        if status_code == 404 and list_id is not None:
            raise ShoppingListNotFoundError(list_id)
        if status_code in (502, 503, 504):
            raise GenerationUnavailableError()
        if status_code == 500:
            raise UnparseableResponseError(
                "Server could not parse the meal suggestion response", raw_text=""
            )
        self._check_status(response)
        body = response.json()
        return [MealSuggestion.model_validate(entry) for entry in body.get("meals") or []]


__all__ = ["SwipeChefApiClient", "generation_http_timeout"]
