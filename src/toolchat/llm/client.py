"""Built-in OpenAI-compatible httpx client with tenacity retry.

Provides a sync HTTP client for OpenAI-compatible chat completion APIs that
implements the CompletionClient protocol. Reads configuration from
constructor arguments or environment variables.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import httpx
import tenacity

from toolchat.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)
from toolchat.protocols import DEFAULT_MAX_TOKENS, Completion, to_openai_messages

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolchat.protocols import Message
    from toolchat.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

API_KEY_ENV = "TOOLCHAT_OPENAI_API_KEY"
BASE_URL_ENV = "TOOLCHAT_OPENAI_BASE_URL"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, LLMRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Implements the CompletionClient protocol. Supports retry with exponential
    backoff for transient errors (429, 5xx). Fails immediately on
    authentication errors (401, 403).

    Usage::

        with OpenAIClient(api_key="sk-...") as client:
            completion = client.complete([Message.user("Hello")])
            print(completion.text)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = "gpt-4o-mini",
        timeout: float = 120.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key. Falls back to TOOLCHAT_OPENAI_API_KEY env var.
            base_url: API base URL. Falls back to TOOLCHAT_OPENAI_BASE_URL
                env var, then to https://api.openai.com/v1.
            default_model: Default model for chat requests.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            transport: Optional httpx transport (e.g. httpx.MockTransport).

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = api_key or os.environ.get(API_KEY_ENV, "")
        if not self._api_key:
            raise LLMConfigError(
                f"No API key provided. Pass api_key= or set {API_KEY_ENV} "
                "environment variable."
            )
        self._base_url = (
            base_url or os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL)
        ).rstrip("/")
        self._default_model = default_model
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def base_url(self) -> str:
        return self._base_url

    def complete(
        self,
        messages: Sequence[Message],
        *,
        tools: Sequence[ToolDefinition] | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        tool_choice: str = "auto",
        **kwargs: Any,
    ) -> Completion:
        """Request the next assistant turn for a conversation.

        Args:
            messages: The full request, in order.
            tools: Tool definitions to declare. ``None`` or empty sends no
                tools, so the model cannot request one.
            max_tokens: Maximum tokens to generate.
            tool_choice: Tool-choice mode sent alongside declared tools.
            **kwargs: Additional payload parameters (model, temperature, ...).

        Returns:
            The parsed first choice.

        Raises:
            LLMAuthError, LLMRateLimitError, LLMResponseError,
            httpx.HTTPError: As for ``chat()``.
        """
        payload_kwargs: dict[str, Any] = dict(kwargs)
        if tools:
            payload_kwargs["tools"] = [t.to_openai() for t in tools]
            payload_kwargs["tool_choice"] = tool_choice
        response = self.chat(
            to_openai_messages(messages),
            max_tokens=max_tokens,
            **payload_kwargs,
        )
        return Completion.from_openai(response)

    def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send a raw chat completion request with retry.

        Uses tenacity.Retrying programmatically (not as decorator) so that
        max_retries is configurable per-instance.

        Args:
            messages: List of OpenAI message dicts.
            model: Model to use. Falls back to default_model.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional payload parameters forwarded to the API.

        Returns:
            Full response dict with 'choices', 'usage', 'model', etc.

        Raises:
            LLMAuthError: On 401/403 (no retry).
            LLMRateLimitError: On 429 after all retries exhausted.
            LLMResponseError: On unexpected response format.
            httpx.HTTPStatusError: On other non-retryable HTTP errors.
        """
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(
            self._do_chat,
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    def _do_chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Execute a single chat completion request (no retry)."""
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        payload.update(kwargs)

        response = self._client.post(
            f"{self._base_url}/chat/completions",
            json=payload,
        )

        # Check for auth errors before raise_for_status
        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise LLMAuthError(response.status_code, response.text)

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(response.text, retry_after=retry_after)

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                f"Response body is not JSON: {response.text[:200]}",
                response=response.text,
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise LLMResponseError(
                "Unexpected response format: missing 'choices' key",
                response=data,
                status_code=response.status_code,
            )
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
