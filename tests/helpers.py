"""Shared test helpers: scripted completion clients and response builders.

All tests use these fakes -- no real API calls.
"""

from __future__ import annotations

import json

from toolchat import Completion, ToolCall


def text_completion(text: str | None = "Hello!") -> Completion:
    """Completion with plain content and no tool call."""
    return Completion(content=text)


def tool_completion(
    tool_name: str,
    arguments: dict | str,
    call_id: str = "call_1",
) -> Completion:
    """Completion requesting a single tool call."""
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return Completion(tool_call=ToolCall(name=tool_name, raw_arguments=raw, id=call_id))


def openai_response(
    content: str | None = "Hello!",
    tool_calls: list[dict] | None = None,
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
) -> dict:
    """Build a realistic OpenAI chat completion response dict."""
    message: dict = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-test123",
        "object": "chat.completion",
        "model": "gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": message,
                "finish_reason": "tool_calls" if tool_calls else "stop",
            }
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


def openai_tool_call(name: str, arguments: dict, call_id: str = "call_1") -> dict:
    """One entry of an OpenAI ``tool_calls`` array."""
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments)},
    }


class ScriptedClient:
    """A completion client that replays canned results and records calls.

    Each scripted item is returned in order; an exception instance is raised
    instead of returned.
    """

    def __init__(self, responses: list | None = None) -> None:
        self._responses = list(responses or [])
        self.calls: list[dict] = []
        self.closed = False

    def complete(self, messages, *, tools=None, max_tokens=512, **kwargs):
        self.calls.append({
            "messages": list(messages),
            "tools": tools,
            "max_tokens": max_tokens,
            "kwargs": kwargs,
        })
        if not self._responses:
            raise AssertionError("ScriptedClient ran out of responses")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True
