"""Helpers for running the SwipeChef ASGI application under uvicorn."""

from __future__ import annotations

import os

import uvicorn

APP_PATH = "swipechef.server.app:app"


def serve(host: str | None = None, port: int | None = None, *, reload: bool = False) -> None:
    """Run the API server, falling back to SWIPECHEF_SERVER_HOST / _PORT."""

    resolved_host = host or os.environ.get("SWIPECHEF_SERVER_HOST", "127.0.0.1")
    raw_port = port if port is not None else os.environ.get("SWIPECHEF_SERVER_PORT", "8000")
    try:
        resolved_port = int(raw_port)
    except ValueError as exc:
        raise SystemExit(f"Invalid SWIPECHEF_SERVER_PORT '{raw_port}': {exc}") from exc

    uvicorn.run(APP_PATH, host=resolved_host, port=resolved_port, reload=reload)


def main() -> None:
    serve(reload=os.environ.get("RELOAD") == "1")


if __name__ == "__main__":
    main()
