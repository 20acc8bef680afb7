"""Generative text runtime abstraction layer."""

from __future__ import annotations

from typing import Protocol

from swipechef.meals.prompt import GenerationRequest


class GenerativeTextClient(Protocol):
    """Protocol for generative text backends."""

    provider: str

    def generate(self, request: GenerationRequest, *, timeout: float | None = None) -> str:
        """Return the raw text reply for the supplied request."""


class StaticTextClient:
    """Deterministic backend that always answers with the same text, for development."""

    provider = "static"

    def __init__(self, reply: str = "[]") -> None:
        self._reply = reply
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest, *, timeout: float | None = None) -> str:
        self.requests.append(request)
        return self._reply
