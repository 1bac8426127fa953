"""Tests for the toolchat.llm package.

Tests cover:
- OpenAIClient: request formatting, tool declarations, retry behavior,
  auth errors, env config
- CompletionClient protocol: conformance, custom implementations
- Error hierarchy: correct inheritance, error attributes
"""

from __future__ import annotations

import json

import httpx
import pytest

from helpers import openai_response, openai_tool_call
from toolchat import (
    CompletionClient,
    Message,
    Role,
    ToolCall,
    ToolChatError,
    default_registry,
)
from toolchat.llm import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
    OpenAIClient,
)


# ---------------------------------------------------------------------------
# Fixtures and helpers
# ---------------------------------------------------------------------------

def _make_client(
    handler=None,
    api_key: str = "test-key",
    base_url: str = "http://test-api",
    max_retries: int = 3,
    **kwargs,
) -> OpenAIClient:
    """Create an OpenAIClient backed by an httpx.MockTransport."""
    if handler is None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=openai_response())

    return OpenAIClient(
        api_key=api_key,
        base_url=base_url,
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _capturing(captured: dict, response: dict | None = None):
    """Handler that stores the last request payload in ``captured``."""
    def handler(request: httpx.Request) -> httpx.Response:
        captured["payload"] = json.loads(request.content)
        captured["headers"] = dict(request.headers)
        captured["url"] = str(request.url)
        return httpx.Response(200, json=response or openai_response())

    return handler


def _counting(statuses: list[int], final: dict | None = None):
    """Handler returning each status in turn, then 200; exposes ``calls``."""
    state = {"calls": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        state["calls"] += 1
        if state["calls"] <= len(statuses):
            return httpx.Response(statuses[state["calls"] - 1], json={"error": "x"})
        return httpx.Response(200, json=final or openai_response())

    return handler, state


# ===========================================================================
# Error hierarchy tests
# ===========================================================================

class TestErrorHierarchy:
    """Verify the LLM error hierarchy."""

    @pytest.mark.parametrize(
        "error_class",
        [LLMConfigError, LLMRateLimitError, LLMAuthError, LLMResponseError],
    )
    def test_inherits_client_error(self, error_class):
        assert issubclass(error_class, LLMClientError)

    def test_client_error_inherits_toolchat_error(self):
        assert issubclass(LLMClientError, ToolChatError)

    def test_rate_limit_error_has_retry_after(self):
        err = LLMRateLimitError("rate limited", retry_after=30.0)
        assert err.retry_after == 30.0
        assert "30.0s" in str(err)

    def test_rate_limit_error_no_retry_after(self):
        err = LLMRateLimitError("rate limited")
        assert err.retry_after is None
        assert err.status_code == 429

    def test_auth_error_carries_status_and_body(self):
        err = LLMAuthError(403, '{"error": "forbidden"}')
        assert err.status_code == 403
        assert err.body == '{"error": "forbidden"}'
        assert str(err) == 'Authentication failed: HTTP 403 - {"error": "forbidden"}'

    def test_long_bodies_are_shortened_in_message(self):
        err = LLMAuthError(401, "x" * 1000)
        assert len(err.body) == 1000
        assert str(err).endswith("x" * 200 + "...")

    def test_response_error_carries_response(self):
        err = LLMResponseError("bad shape", response={"choices": []}, status_code=200)
        assert err.response == {"choices": []}
        assert err.status_code == 200

    def test_config_error_has_no_status(self):
        assert LLMConfigError("no key").status_code is None


# ===========================================================================
# OpenAIClient.chat()
# ===========================================================================

class TestOpenAIClientChat:
    """Test OpenAIClient.chat() with mocked httpx transport."""

    def test_chat_success(self):
        client = _make_client()
        response = client.chat([{"role": "user", "content": "Hello"}])
        assert response["choices"][0]["message"]["content"] == "Hello!"
        client.close()

    def test_chat_request_format(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        client.chat(
            [{"role": "user", "content": "Test"}],
            model="gpt-4o",
            temperature=0.5,
            max_tokens=100,
        )

        payload = captured["payload"]
        assert payload["model"] == "gpt-4o"
        assert payload["messages"] == [{"role": "user", "content": "Test"}]
        assert payload["temperature"] == 0.5
        assert payload["max_tokens"] == 100
        assert captured["url"] == "http://test-api/chat/completions"
        assert captured["headers"]["authorization"] == "Bearer test-key"
        client.close()

    def test_chat_with_default_model(self):
        captured: dict = {}
        client = _make_client(_capturing(captured), default_model="gpt-3.5-turbo")
        client.chat([{"role": "user", "content": "Hello"}])
        assert captured["payload"]["model"] == "gpt-3.5-turbo"
        client.close()

    def test_optional_params_omitted(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        client.chat([{"role": "user", "content": "Hello"}])
        assert "temperature" not in captured["payload"]
        assert "max_tokens" not in captured["payload"]
        client.close()

    def test_chat_forwards_extra_kwargs(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        client.chat([{"role": "user", "content": "Test"}], top_p=0.9, seed=7)
        assert captured["payload"]["top_p"] == 0.9
        assert captured["payload"]["seed"] == 7
        client.close()

    def test_response_missing_choices_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "no choices"})

        client = _make_client(handler)
        with pytest.raises(LLMResponseError, match="missing 'choices'") as exc_info:
            client.chat([{"role": "user", "content": "Test"}])
        assert exc_info.value.response == {"error": "no choices"}
        client.close()

    def test_non_json_body_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        client = _make_client(handler)
        with pytest.raises(LLMResponseError, match="not JSON") as exc_info:
            client.chat([{"role": "user", "content": "Test"}])
        assert exc_info.value.response == "<html>oops</html>"
        assert exc_info.value.status_code == 200
        client.close()


# ===========================================================================
# OpenAIClient.complete()
# ===========================================================================

class TestOpenAIClientComplete:
    """Test the CompletionClient surface: tools, tool_choice, message wire."""

    def test_declares_tools_with_auto_choice(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        registry = default_registry()
        client.complete([Message.user("hi")], tools=registry.list_definitions())

        payload = captured["payload"]
        assert payload["tools"] == registry.to_openai()
        assert payload["tool_choice"] == "auto"
        assert payload["max_tokens"] == 512
        client.close()

    @pytest.mark.parametrize("tools", [None, ()])
    def test_no_tools_sends_no_declarations(self, tools):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        client.complete([Message.user("hi")], tools=tools)
        assert "tools" not in captured["payload"]
        assert "tool_choice" not in captured["payload"]
        client.close()

    def test_custom_max_tokens_and_model(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        client.complete([Message.user("hi")], max_tokens=64, model="gpt-4o")
        assert captured["payload"]["max_tokens"] == 64
        assert captured["payload"]["model"] == "gpt-4o"
        client.close()

    def test_tool_result_wire_format(self):
        captured: dict = {}
        client = _make_client(_capturing(captured))
        call = ToolCall(name="persist_data", raw_arguments='{"data": "x", "type": "note"}', id="call_5")
        client.complete([
            Message.system("sys"),
            Message.user("save x"),
            Message.assistant(tool_call=call),
            Message.tool("persist_data", '{"id": "1234"}'),
        ])

        messages = captured["payload"]["messages"]
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool"]
        assert messages[2]["tool_calls"][0]["function"]["name"] == "persist_data"
        assert messages[3] == {
            "role": "tool",
            "name": "persist_data",
            "content": '{"id": "1234"}',
            "tool_call_id": "call_5",
        }
        client.close()

    def test_returns_parsed_completion(self):
        response = openai_response(
            None, tool_calls=[openai_tool_call("get_current_weather", {"location": "Oslo"})],
        )
        client = _make_client(_capturing({}, response))
        completion = client.complete([Message.user("weather?")])
        assert completion.role is Role.ASSISTANT
        assert completion.tool_call.name == "get_current_weather"
        assert completion.usage["prompt_tokens"] == 10
        client.close()

    def test_malformed_choice_raises_response_error(self):
        client = _make_client(_capturing({}, {"choices": []}))
        with pytest.raises(LLMResponseError):
            client.complete([Message.user("hi")])
        client.close()


# ===========================================================================
# Retry behavior
# ===========================================================================

@pytest.mark.usefixtures("no_sleep")
class TestOpenAIClientRetry:
    """Test retry behavior with different HTTP status codes."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retry_then_success(self, status):
        handler, state = _counting([status])
        client = _make_client(handler, max_retries=3)
        response = client.chat([{"role": "user", "content": "Test"}])
        assert state["calls"] == 2
        assert "choices" in response
        client.close()

    def test_retry_on_connect_error(self):
        state = {"calls": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            state["calls"] += 1
            if state["calls"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=openai_response())

        client = _make_client(handler)
        client.chat([{"role": "user", "content": "Test"}])
        assert state["calls"] == 2
        client.close()

    @pytest.mark.parametrize("status", [401, 403])
    def test_no_retry_on_auth_errors(self, status):
        handler, state = _counting([status] * 3)
        client = _make_client(handler, max_retries=3)
        with pytest.raises(LLMAuthError, match="Authentication failed") as exc_info:
            client.chat([{"role": "user", "content": "Test"}])
        assert exc_info.value.status_code == status
        assert state["calls"] == 1
        client.close()

    def test_no_retry_on_400(self):
        handler, state = _counting([400] * 3)
        client = _make_client(handler, max_retries=3)
        with pytest.raises(httpx.HTTPStatusError):
            client.chat([{"role": "user", "content": "Test"}])
        assert state["calls"] == 1
        client.close()

    def test_max_retries_exhausted(self):
        handler, state = _counting([429] * 10)
        client = _make_client(handler, max_retries=3)
        with pytest.raises(LLMRateLimitError):
            client.chat([{"role": "user", "content": "Test"}])
        assert state["calls"] == 3
        client.close()

    def test_rate_limit_error_has_retry_after(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": "x"}, headers={"Retry-After": "42"})

        client = _make_client(handler, max_retries=1)
        with pytest.raises(LLMRateLimitError) as exc_info:
            client.chat([{"role": "user", "content": "Test"}])
        assert exc_info.value.retry_after == 42.0
        client.close()

    def test_retries_are_logged(self, caplog):
        handler, _ = _counting([503])
        client = _make_client(handler)
        client.chat([{"role": "user", "content": "Test"}])
        assert "Retrying" in caplog.text
        client.close()


# ===========================================================================
# Configuration
# ===========================================================================

class TestOpenAIClientConfig:
    """Test client configuration and environment variables."""

    def test_env_var_api_key(self, monkeypatch):
        monkeypatch.setenv("TOOLCHAT_OPENAI_API_KEY", "env-key-123")
        client = OpenAIClient()
        assert client._api_key == "env-key-123"
        client.close()

    def test_env_var_base_url(self, monkeypatch):
        monkeypatch.setenv("TOOLCHAT_OPENAI_API_KEY", "test-key")
        monkeypatch.setenv("TOOLCHAT_OPENAI_BASE_URL", "http://custom-api/v1")
        client = OpenAIClient()
        assert client.base_url == "http://custom-api/v1"
        client.close()

    def test_default_base_url(self, monkeypatch):
        monkeypatch.delenv("TOOLCHAT_OPENAI_BASE_URL", raising=False)
        client = OpenAIClient(api_key="test-key")
        assert client.base_url == "https://api.openai.com/v1"
        client.close()

    def test_constructor_overrides_env(self, monkeypatch):
        monkeypatch.setenv("TOOLCHAT_OPENAI_API_KEY", "env-key")
        monkeypatch.setenv("TOOLCHAT_OPENAI_BASE_URL", "http://env-url/v1")
        client = OpenAIClient(api_key="arg-key", base_url="http://arg-url/v1")
        assert client._api_key == "arg-key"
        assert client.base_url == "http://arg-url/v1"
        client.close()

    @pytest.mark.parametrize("api_key", [None, ""])
    def test_missing_api_key_raises(self, monkeypatch, api_key):
        monkeypatch.delenv("TOOLCHAT_OPENAI_API_KEY", raising=False)
        with pytest.raises(LLMConfigError, match="No API key"):
            OpenAIClient(api_key=api_key)

    def test_context_manager(self):
        with OpenAIClient(api_key="test-key") as client:
            assert isinstance(client, OpenAIClient)
        assert client._client.is_closed

    def test_base_url_trailing_slash_stripped(self):
        client = OpenAIClient(api_key="test-key", base_url="http://api/v1/")
        assert client.base_url == "http://api/v1"
        client.close()


# ===========================================================================
# Protocol conformance tests
# ===========================================================================

class TestProtocolConformance:
    def test_openai_client_conforms(self):
        client = OpenAIClient(api_key="test-key")
        assert isinstance(client, CompletionClient)
        client.close()

    def test_custom_client_conforms(self):
        class FullClient:
            def complete(self, messages, *, tools=None, max_tokens=512, **kwargs):
                raise NotImplementedError

            def close(self):
                pass

        assert isinstance(FullClient(), CompletionClient)

    def test_missing_method_does_not_conform(self):
        class NoClose:
            def complete(self, messages, **kwargs):
                raise NotImplementedError

        assert not isinstance(NoClose(), CompletionClient)
