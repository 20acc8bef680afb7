"""ASGI application factory and dependencies for the SwipeChef server."""

from swipechef.server.app import app, create_app

__all__ = ["app", "create_app"]
