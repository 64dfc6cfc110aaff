"""OpenRouter chat-completions client with timeout, retry and output validation."""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from app.models.schemas import TONES, GenerationOptions, MotivationalMessage, PromptBundle
from app.services.errors import ApiError, RequestTimeoutError, ValidationError


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "meta-llama/llama-3.3-70b-instruct:free"
DEFAULT_MAX_TOKENS = 100
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9

_EXPECTED_KEYS = {"message", "tone"}


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt ``attempt`` (1-based): 2, 4, 8, ..."""
    return float(2 ** attempt)


def parse_completion(payload: Any, fallback_model: str) -> MotivationalMessage:
    """Validate a chat-completions response body and turn it into a message.

    Every field is checked even though the request declared a strict schema.

    Raises:
        ValidationError: on any deviation from the expected shape.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid response structure from API")

    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ValidationError("Response contained no completions")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Completion content is empty")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValidationError("Failed to parse JSON response from API") from exc

    if not isinstance(parsed, dict):
        raise ValidationError("Completion JSON must be an object")

    missing = _EXPECTED_KEYS - parsed.keys()
    if missing:
        raise ValidationError(f"Response missing required field(s): {', '.join(sorted(missing))}")
    extra = parsed.keys() - _EXPECTED_KEYS
    if extra:
        raise ValidationError(f"Response contained unexpected field(s): {', '.join(sorted(extra))}")

    text = parsed["message"]
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Field 'message' must be a non-empty string")

    tone = parsed["tone"]
    if not isinstance(tone, str) or tone not in TONES:
        raise ValidationError(f"Field 'tone' must be one of {', '.join(TONES)}")

    model = payload.get("model")
    return MotivationalMessage(
        message=text.strip(),
        tone=tone,
        generated_at=datetime.now(timezone.utc),
        model=model if isinstance(model, str) and model else fallback_model,
        cached=False,
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or "Unknown error"


class OpenRouterClient:
    """Calls the OpenRouter chat-completions endpoint for one structured answer.

    Transient faults (timeouts, transport errors, HTTP 429 and 5xx) are
    retried with exponential backoff up to ``max_retries`` attempts in total.
    Everything else, including malformed model output, fails immediately.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout_ms: int = 30_000,
        max_retries: int = 3,
        app_url: str | None = None,
        app_title: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("OpenRouter API key is required")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_seconds = timeout_ms / 1000
        self.max_retries = max_retries
        self._app_url = app_url
        self._app_title = app_title
        self._sleep = sleep
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))

    def __repr__(self) -> str:
        return f"OpenRouterClient(base_url={self.base_url!r}, model={self.model!r})"

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._app_url:
            headers["HTTP-Referer"] = self._app_url
        if self._app_title:
            headers["X-Title"] = self._app_title
        return headers

    def build_request_body(self, prompt: PromptBundle, options: GenerationOptions | None = None) -> dict[str, Any]:
        options = options or GenerationOptions()
        return {
            "model": options.model or self.model,
            "messages": [
                {"role": "system", "content": prompt.system_message},
                {"role": "user", "content": prompt.user_message},
            ],
            "response_format": prompt.response_format,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE,
            "top_p": DEFAULT_TOP_P,
        }

    async def generate(self, prompt: PromptBundle, options: GenerationOptions | None = None) -> MotivationalMessage:
        """Request one motivational message.

        Raises:
            RequestTimeoutError: every attempt exceeded its deadline
            ApiError: terminal HTTP failure, or retries exhausted
            ValidationError: the model answered with something off-schema
        """
        body = self.build_request_body(prompt, options)
        payload = await self._post_with_retries("/chat/completions", body)
        result = parse_completion(payload, fallback_model=body["model"])
        logger.info("Generated motivation with %s (tone=%s)", result.model, result.tone)
        return result

    async def test_connection(self) -> bool:
        """Send a tiny request to confirm the credential and endpoint work."""
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": "Hello"}],
            "max_tokens": 5,
        }
        try:
            await self._post_with_retries("/chat/completions", body)
        except (ApiError, RequestTimeoutError, ValidationError) as exc:
            logger.warning("OpenRouter connection test failed: %s", exc)
            return False
        return True

    async def _post_with_retries(self, endpoint: str, body: dict[str, Any]) -> Any:
        url = f"{self.base_url}{endpoint}"
        attempt = 1
        while True:
            try:
                return await self._attempt(url, body, attempt)
            except (RequestTimeoutError, ApiError) as exc:
                retryable = isinstance(exc, RequestTimeoutError) or exc.retryable
                if not retryable:
                    logger.warning("OpenRouter request failed permanently on attempt %d: %s", attempt, exc)
                    raise
                if attempt >= self.max_retries:
                    logger.warning("OpenRouter request failed after %d attempt(s): %s", attempt, exc)
                    raise

                delay = backoff_delay(attempt)
                logger.info(
                    "OpenRouter attempt %d/%d failed (%s); retrying in %.0fs",
                    attempt,
                    self.max_retries,
                    exc,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1

    async def _attempt(self, url: str, body: dict[str, Any], attempt: int) -> Any:
        logger.debug("OpenRouter request attempt %d (model=%s)", attempt, body.get("model"))
        try:
            response = await asyncio.wait_for(
                self._http.post(url, json=body, headers=self._headers()),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(
                f"Request exceeded {self.timeout_seconds:g}s deadline"
            ) from exc
        except httpx.TransportError as exc:
            raise ApiError(f"Transport error: {type(exc).__name__}") from exc

        if response.status_code >= 400:
            raise ApiError(_error_detail(response), response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ValidationError("API returned a non-JSON body") from exc
