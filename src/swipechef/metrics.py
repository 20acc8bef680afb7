"""Prometheus metrics definitions for SwipeChef."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "swipechef_http_requests_total",
    "Total number of HTTP requests processed by the SwipeChef API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "swipechef_http_request_duration_seconds",
    "Latency of HTTP requests processed by the SwipeChef API",
    ["method", "path"],
)

MEAL_GENERATIONS = Counter(
    "swipechef_meal_generations_total",
    "Meal suggestion generations by outcome",
    ["outcome"],
)

GENERATION_LATENCY = Histogram(
    "swipechef_generation_duration_seconds",
    "Latency of calls to the generative text provider",
    ["provider"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "MEAL_GENERATIONS",
    "GENERATION_LATENCY",
]
