"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/swipechef.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    api_base_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Base URL the CLI selector uses to reach the API server.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    llm_provider: str = Field(
        default="gemini",
        description="Generative text provider (gemini, openai or ollama).",
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        description="Provider base URL; gemini falls back to the public endpoint when unset.",
    )
    llm_model: str = Field(
        default="gemini-2.5-flash",
        description="Model identifier passed to the provider.",
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="API key for providers that require one.",
    )
    llm_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for meal generation.",
    )
    llm_max_tokens: int = Field(
        default=2048,
        description="Maximum tokens to request from the provider.",
    )
    llm_timeout: float = Field(
        default=30.0,
        description="Seconds before a generation call is abandoned.",
    )
    meal_count: int = Field(
        default=3,
        description="Number of meal suggestions requested per generation.",
    )
    meal_strict_validation: bool = Field(
        default=True,
        description="Reject model replies whose entries do not match the meal schema.",
    )
    swipe_threshold: float = Field(
        default=100.0,
        description="Drag distance a card must travel before a swipe registers.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("SWIPECHEF_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (api_token := _env("SWIPECHEF_API_TOKEN")):
        payload["api_token"] = api_token
    if (api_base_url := _env("SWIPECHEF_API_BASE_URL")):
        payload["api_base_url"] = api_base_url
    if (log_level := _env("SWIPECHEF_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("SWIPECHEF_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("SWIPECHEF_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (llm_provider := _env("SWIPECHEF_LLM_PROVIDER")):
        payload["llm_provider"] = llm_provider
    if (llm_base_url := _env("SWIPECHEF_LLM_BASE_URL")):
        payload["llm_base_url"] = llm_base_url
    if (llm_model := _env("SWIPECHEF_LLM_MODEL")):
        payload["llm_model"] = llm_model
    if (llm_api_key := _env("SWIPECHEF_LLM_API_KEY") or _env("GEMINI_API_KEY")):
        payload["llm_api_key"] = llm_api_key
    if (llm_temperature := _env("SWIPECHEF_LLM_TEMPERATURE")):
        try:
            payload["llm_temperature"] = float(llm_temperature)
        except ValueError:
            pass
    if (llm_max_tokens := _env("SWIPECHEF_LLM_MAX_TOKENS")):
        try:
            payload["llm_max_tokens"] = int(llm_max_tokens)
        except ValueError:
            pass
    if (llm_timeout := _env("SWIPECHEF_LLM_TIMEOUT")):
        try:
            payload["llm_timeout"] = float(llm_timeout)
        except ValueError:
            pass
    if (meal_count := _env("SWIPECHEF_MEAL_COUNT")):
        try:
            payload["meal_count"] = int(meal_count)
        except ValueError:
            pass
    if (strict := _env("SWIPECHEF_MEAL_STRICT_VALIDATION")):
        payload["meal_strict_validation"] = _coerce_bool(strict)
    if (swipe_threshold := _env("SWIPECHEF_SWIPE_THRESHOLD")):
        try:
            payload["swipe_threshold"] = float(swipe_threshold)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
