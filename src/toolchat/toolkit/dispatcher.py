"""ToolDispatcher: routes model-emitted tool calls to registered handlers.

Provides a single ``dispatch()`` method that looks up the tool by name,
decodes the raw arguments into the tool's pydantic model, invokes its
handler, and returns the handler's value unmodified. Every failure is raised
as a DispatchError subclass; nothing here terminates the process.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from toolchat.exceptions import HandlerFailedError, InvalidArgumentsError

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from toolchat.protocols import ToolCall
    from toolchat.toolkit.models import ToolDefinition
    from toolchat.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Dispatches tool calls against a ToolRegistry.

    Usage::

        dispatcher = ToolDispatcher(registry)
        try:
            value = dispatcher.dispatch(call)
        except DispatchError as exc:
            print(exc)
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def dispatch(self, call: ToolCall) -> Any:
        """Execute a tool call and return the handler's result.

        Args:
            call: The tool call extracted from a completion.

        Returns:
            Whatever the handler returned (awaited if it was awaitable).

        Raises:
            ToolNotFoundError: The registry has no tool named ``call.name``.
            InvalidArgumentsError: The arguments do not decode to the
                tool's argument model.
            HandlerFailedError: The handler raised.
        """
        tool = self._registry.resolve(call.name)
        arguments = self.decode_arguments(tool, call.raw_arguments)
        logger.debug("Dispatching %s(%s)", tool.name, arguments)

        try:
            result = tool.handler(arguments)
            if inspect.isawaitable(result):
                result = _run_awaitable(result)
        except Exception as exc:
            logger.debug("Tool %s failed: %s", tool.name, exc, exc_info=True)
            raise HandlerFailedError(tool.name, exc) from exc
        return result

    @staticmethod
    def decode_arguments(tool: ToolDefinition, raw: str | Mapping[str, Any] | None) -> BaseModel:
        """Decode raw tool-call arguments into the tool's argument model.

        ``None`` and the empty string decode as an empty object.

        Raises:
            InvalidArgumentsError: On malformed JSON, a non-object payload,
                or a pydantic validation failure.
        """
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            data: Any = {}
        elif isinstance(raw, str):
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise InvalidArgumentsError(tool.name, f"malformed JSON ({exc.msg})") from exc
        else:
            data = raw

        if not isinstance(data, Mapping):
            raise InvalidArgumentsError(
                tool.name, f"expected a JSON object, got {type(data).__name__}"
            )

        try:
            return tool.arguments_model.model_validate(dict(data))
        except ValidationError as exc:
            detail = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidArgumentsError(tool.name, detail) from exc


def serialize_result(value: Any) -> str:
    """Render a handler result as message content.

    Strings pass through; pydantic models use their JSON form; anything else
    is JSON-encoded (non-JSON values fall back to ``str``).
    """
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, default=str)


def _run_awaitable(awaitable: Awaitable[Any]) -> Any:
    """Drive an awaitable handler result to completion.

    With no event loop running in this thread it runs on a fresh loop.
    Inside a running loop (an async host calling ``turn()``) that loop cannot
    be re-entered, so the awaitable runs on its own loop in a worker thread
    and this thread blocks on the result.
    """

    async def _await() -> Any:
        return await awaitable

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await())

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="toolchat-handler") as pool:
        return pool.submit(asyncio.run, _await()).result()
