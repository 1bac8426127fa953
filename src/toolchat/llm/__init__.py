"""LLM client infrastructure for toolchat.

Provides an OpenAI-compatible HTTP completion client and its error types.
"""

from toolchat.llm.client import OpenAIClient
from toolchat.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)

__all__ = [
    "OpenAIClient",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
