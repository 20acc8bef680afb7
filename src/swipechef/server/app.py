"""ASGI application for SwipeChef."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, NoReturn, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, ConfigDict, Field

from swipechef import __version__, metrics
from swipechef.config import Settings, get_settings
from swipechef.logging_utils import configure_logging as configure_app_logging
from swipechef.meals.errors import (
    EmptySelectionError,
    GenerationUnavailableError,
    MealSuggestionError,
    ShoppingListNotFoundError,
    UnparseableResponseError,
)
from swipechef.meals.orchestrator import MealSuggestionOrchestrator
from swipechef.models.meals import MealSuggestion
from swipechef.models.shopping import Product, ShoppingList
from swipechef.server import deps

logger = logging.getLogger(__name__)

MAX_GENERATION_TIMEOUT = 120.0


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex()
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return repr(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.llm_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def _raise_for_meal_error(exc: MealSuggestionError) -> NoReturn:
    """Translate pipeline failures into user-safe HTTP errors."""

    if isinstance(exc, EmptySelectionError):
        detail = "No items provided"
    elif isinstance(exc, GenerationUnavailableError):
        detail = "Failed to get meal suggestions"
    elif isinstance(exc, UnparseableResponseError):
        # The raw model text stays in the logs.
        detail = "Failed to parse meal suggestions response"
    elif isinstance(exc, ShoppingListNotFoundError):
        detail = "List not found"
    else:
        detail = "Meal suggestion failed"
    raise HTTPException(status_code=exc.http_status, detail=detail) from exc


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="SwipeChef", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("swipechef.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                duration_ms / 1000.0
            )
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body_preview: str | None = None
        try:
            raw_body = await request.body()
            if raw_body:
                decoded = raw_body.decode("utf-8", errors="replace")
                if len(decoded) > 2048:
                    decoded = decoded[:2048] + "...(truncated)"
                body_preview = decoded
        except Exception:  # pragma: no cover - defensive logging
            body_preview = "<unable to read body>"

        log_kwargs: dict[str, Any] = {}
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            log_kwargs["extra"] = {"request_id": request_id}

        logger.warning(
            "Validation error on %s %s: %s | body=%s",
            request.method,
            request.url.path,
            exc.errors(),
            body_preview,
            **log_kwargs,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": _normalize_validation_errors(exc.errors())},
        )

    @application.get("/health", summary="Service health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.post(
        "/shopping-lists",
        response_model=ShoppingList,
        status_code=status.HTTP_201_CREATED,
        summary="Create shopping list",
    )
    def shopping_lists_create(
        payload: Optional[ShoppingListCreateRequest] = Body(default=None),
        auth: None = Depends(deps.require_api_token),
        creator: deps.ShoppingListCreator = Depends(deps.get_shopping_list_creator),
    ) -> ShoppingList:
        request_payload = payload or ShoppingListCreateRequest()
        created = creator(request_payload.model_dump())
        logger.debug("Created shopping list id=%s owner=%s", created.id, created.owner)
        return created

    @application.get(
        "/shopping-lists",
        response_model=list[ShoppingList],
        summary="List shopping lists",
    )
    def shopping_lists_list(
        owner: Optional[str] = Query(default=None, max_length=255),
        provider: deps.ShoppingListsProvider = Depends(deps.get_shopping_lists_provider),
    ) -> list[ShoppingList]:
        return provider(owner)

    @application.get(
        "/shopping-lists/{list_id}",
        response_model=ShoppingList,
        summary="Get shopping list",
    )
    def shopping_lists_get(
        list_id: int,
        fetcher: deps.ShoppingListFetcher = Depends(deps.get_shopping_list_fetcher),
    ) -> ShoppingList:
        shopping_list = fetcher(list_id)
        if shopping_list is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
        return shopping_list

    @application.post(
        "/shopping-lists/{list_id}/items",
        response_model=ShoppingList,
        summary="Add item to shopping list",
    )
    def shopping_lists_add_item(
        list_id: int,
        payload: ShoppingListItemCreateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        adder: deps.ShoppingListItemAdder = Depends(deps.get_shopping_list_item_adder),
    ) -> ShoppingList:
        try:
            return adder(
                list_id,
                {
                    "product": payload.product,
                    "search_query": payload.search_query,
                    "quantity": payload.quantity,
                },
            )
        except ShoppingListNotFoundError as exc:
            _raise_for_meal_error(exc)

    @application.delete(
        "/shopping-lists/{list_id}/items/{item_id}",
        response_model=ShoppingList,
        summary="Remove item from shopping list",
    )
    def shopping_lists_remove_item(
        list_id: int,
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        remover: deps.ShoppingListItemRemover = Depends(deps.get_shopping_list_item_remover),
    ) -> ShoppingList:
        try:
            return remover(list_id, item_id)
        except ShoppingListNotFoundError as exc:
            _raise_for_meal_error(exc)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @application.put(
        "/shopping-lists/{list_id}/meals",
        response_model=ShoppingList,
        summary="Replace meal suggestions on a shopping list",
    )
    def shopping_lists_replace_meals(
        list_id: int,
        payload: MealsUpdateRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        writer: deps.MealSuggestionWriter = Depends(deps.get_meal_suggestion_writer),
    ) -> ShoppingList:
        try:
            return writer(list_id, list(payload.meals))
        except ShoppingListNotFoundError as exc:
            _raise_for_meal_error(exc)

    @application.post(
        "/meal-suggestions",
        response_model=MealSuggestionsResponse,
        summary="Generate meal suggestions from ingredients",
    )
    def meal_suggestions_generate(
        payload: MealSuggestionRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        orchestrator: MealSuggestionOrchestrator = Depends(deps.get_meal_orchestrator),
    ) -> MealSuggestionsResponse:
        try:
            meals = orchestrator.suggest(payload.items, timeout=payload.timeout)
        except MealSuggestionError as exc:
            _raise_for_meal_error(exc)
        return MealSuggestionsResponse(meals=meals)

    @application.post(
        "/shopping-lists/{list_id}/meal-suggestions",
        response_model=MealSuggestionsResponse,
        summary="Generate and store meal suggestions for a shopping list",
    )
    def shopping_lists_generate_meals(
        list_id: int,
        payload: MealSuggestionRequest = Body(...),
        auth: None = Depends(deps.require_api_token),
        fetcher: deps.ShoppingListFetcher = Depends(deps.get_shopping_list_fetcher),
        orchestrator: MealSuggestionOrchestrator = Depends(deps.get_meal_orchestrator),
    ) -> MealSuggestionsResponse:
        if fetcher(list_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
        try:
            meals = orchestrator.generate(list_id, payload.items, timeout=payload.timeout)
        except MealSuggestionError as exc:
            _raise_for_meal_error(exc)
        return MealSuggestionsResponse(meals=meals)

    return application


class ShoppingListCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    owner: Optional[str] = Field(default=None, min_length=1, max_length=255)


class ShoppingListItemCreateRequest(BaseModel):
    search_query: Optional[str] = Field(default=None, max_length=255, alias="searchQuery")
    product: Product
    quantity: int = Field(default=1, ge=1, le=999)

    model_config = ConfigDict(populate_by_name=True)


class MealsUpdateRequest(BaseModel):
    meals: list[MealSuggestion] = Field(default_factory=list)


class MealSuggestionRequest(BaseModel):
    items: list[str] = Field(default_factory=list)
    timeout: Optional[float] = Field(default=None, gt=0, le=MAX_GENERATION_TIMEOUT)


class MealSuggestionsResponse(BaseModel):
    meals: list[MealSuggestion] = Field(default_factory=list)


app = create_app()

__all__ = ["app", "create_app"]
