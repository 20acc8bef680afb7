"""HTTP clients for the generative text providers used for meal suggestions."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional

import httpx

from swipechef import metrics
from swipechef.config import Settings, get_settings
from swipechef.meals.errors import GenerationUnavailableError
from swipechef.meals.prompt import GenerationRequest

DEFAULT_TIMEOUT = 30.0
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
SUPPORTED_PROVIDERS = ("gemini", "openai", "ollama")

GEMINI_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]

logger = logging.getLogger(__name__)


class HttpGenerativeClient:
    """Call a Gemini, OpenAI-compatible or Ollama endpoint and return the reply text."""

    def __init__(
        self,
        *,
        provider: str,
        model: str,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        normalized = (provider or "gemini").strip().lower()
        if normalized not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported generative provider '{provider}'")
        if normalized != "gemini" and not base_url:
            raise ValueError(f"Provider '{normalized}' requires a base URL")
        self.provider = normalized
        self._model = model
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._api_key = api_key
        self._timeout = max(0.1, float(timeout))

    def generate(self, request: GenerationRequest, *, timeout: float | None = None) -> str:
        effective_timeout = self._timeout if timeout is None else max(0.1, float(timeout))
        start = perf_counter()
        try:
            if self.provider == "gemini":
                return self._execute_gemini(request, effective_timeout)
            if self.provider == "ollama":
                return self._execute_ollama(request, effective_timeout)
            return self._execute_openai(request, effective_timeout)
        except httpx.TimeoutException as exc:
            logger.warning(
                "Generative %s request timed out after %.1fs", self.provider, effective_timeout
            )
            raise GenerationUnavailableError(
                "Meal generation timed out", cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Generative %s request failed: %s", self.provider, exc)
            raise GenerationUnavailableError(cause=exc) from exc
        except ValueError as exc:
            logger.warning("Generative %s reply was unusable: %s", self.provider, exc)
            raise GenerationUnavailableError(cause=exc) from exc
        finally:
            metrics.GENERATION_LATENCY.labels(provider=self.provider).observe(
                perf_counter() - start
            )

    def _post(
        self,
        endpoint: str,
        payload: dict[str, Any],
        timeout: float,
        headers: dict[str, str],
    ) -> Any:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(endpoint, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()

    def _execute_gemini(self, request: GenerationRequest, timeout: float) -> str:
        if not self._api_key:
            raise ValueError("Gemini provider requires an API key")
        endpoint = f"{self._base_url}/models/{self._model}:generateContent"
        config = request.config
        payload = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": config.temperature,
                "topP": config.top_p,
                "topK": config.top_k,
                "maxOutputTokens": config.max_tokens,
            },
            "safetySettings": GEMINI_SAFETY_SETTINGS,
        }
        body = self._post(endpoint, payload, timeout, {"x-goog-api-key": self._api_key})
        candidates = body.get("candidates") or []
        if not candidates:
            feedback = body.get("promptFeedback") or {}
            raise ValueError(f"Gemini returned no candidates (feedback={feedback})")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        content = "".join(part.get("text") or "" for part in parts).strip()
        if not content:
            raise ValueError("Gemini returned an empty response.")
        return content

    def _execute_openai(self, request: GenerationRequest, timeout: float) -> str:
        endpoint = self._base_url
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        config = request.config
        payload = {
            "model": self._model,
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_tokens,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        body = self._post(endpoint, payload, timeout, headers)
        choices = body.get("choices") or []
        if not choices:
            raise ValueError("Generative endpoint returned no choices.")
        message = choices[0].get("message") or {}
        content = (message.get("content") or "").strip()
        if not content:
            raise ValueError("Generative endpoint returned an empty response.")
        return content

    def _execute_ollama(self, request: GenerationRequest, timeout: float) -> str:
        endpoint = self._base_url
        if not endpoint.endswith("/api/chat"):
            endpoint = f"{endpoint}/api/chat"
        config = request.config
        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": request.prompt}],
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "top_p": config.top_p,
                "top_k": config.top_k,
                "num_predict": config.max_tokens,
            },
        }
        body = self._post(endpoint, payload, timeout, {})
        message = body.get("message") or {}
        content = (message.get("content") or "").strip()
        if not content:
            raise ValueError("Ollama response did not include content.")
        return content


def build_generative_client(settings: Settings | None = None) -> HttpGenerativeClient | None:
    """Create a client from settings, or ``None`` when generation is not configured."""

    settings = settings or get_settings()
    provider = (settings.llm_provider or "gemini").strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        logger.warning("Unsupported generative provider %s configured.", provider)
        return None
    if provider == "gemini" and not settings.llm_api_key:
        logger.debug("Gemini provider selected but no API key configured.")
        return None
    if provider != "gemini" and not settings.llm_base_url:
        logger.debug("Provider %s selected but no base URL configured.", provider)
        return None

    return HttpGenerativeClient(
        provider=provider,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        timeout=settings.llm_timeout,
    )


__all__ = ["HttpGenerativeClient", "build_generative_client", "SUPPORTED_PROVIDERS"]
