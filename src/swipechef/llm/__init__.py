"""Generative text providers."""

from swipechef.llm.client import HttpGenerativeClient, build_generative_client
from swipechef.llm.interface import GenerativeTextClient, StaticTextClient

__all__ = [
    "GenerativeTextClient",
    "HttpGenerativeClient",
    "StaticTextClient",
    "build_generative_client",
]
