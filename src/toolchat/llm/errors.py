"""Errors raised by completion clients.

Each error keeps what the service actually sent (HTTP status, body or
decoded response) so a failed turn can be diagnosed from the
RemoteFailedError that wraps it.
"""

from __future__ import annotations

from typing import Any

from toolchat.exceptions import ToolChatError

# Bodies quoted in messages are cut to this many characters.
_BODY_PREVIEW = 200


def _preview(body: str) -> str:
    body = body.strip()
    if len(body) > _BODY_PREVIEW:
        return body[:_BODY_PREVIEW] + "..."
    return body


class LLMClientError(ToolChatError):
    """Base for completion-client failures.

    Attributes:
        status_code: HTTP status of the failed response, if there was one.
    """

    status_code: int | None = None


class LLMConfigError(LLMClientError):
    """The client cannot be built (e.g. no API key configured)."""


class LLMAuthError(LLMClientError):
    """The service rejected the credentials (401/403). Never retried."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Authentication failed: HTTP {status_code} - {_preview(body)}")


class LLMRateLimitError(LLMClientError):
    """The service answered 429; raised once retries are exhausted.

    Attributes:
        retry_after: Seconds from the Retry-After header, or None.
    """

    status_code = 429

    def __init__(self, body: str = "", retry_after: float | None = None) -> None:
        self.body = body
        self.retry_after = retry_after
        message = f"Rate limited: HTTP 429 - {_preview(body)}"
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class LLMResponseError(LLMClientError):
    """A response arrived but is not a usable chat completion.

    Attributes:
        response: The offending payload (decoded JSON, raw text, or whatever
            object a client returned).
    """

    def __init__(
        self,
        message: str,
        *,
        response: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.response = response
        self.status_code = status_code
        super().__init__(message)
