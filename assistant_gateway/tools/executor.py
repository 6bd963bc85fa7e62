"""
Tool Executor

This module implements the dispatch executor: it runs the tool calls requested
by the model and turns every outcome, success or failure, into a ToolResult
keyed by the originating tool_call_id.

Pattern: Command Executor (executes tool calls as commands)
Pattern: Async-first with sync handler support
Pattern: Errors as values - per-call failures never escape dispatch()

Dispatch is sequential: calls run one at a time in the order the model emitted
them. Tools may mutate shared external state (calendars, mailboxes) and do not
declare a side-effect class, so running them concurrently could reorder those
mutations.
"""

import asyncio
import functools
import inspect
import json
import logging
from typing import Any, Optional

from pydantic import BaseModel

from assistant_gateway.core.exceptions import ToolExecutionError, ToolNotFoundError
from assistant_gateway.models.domain import RegisteredTool, ToolCall, ToolResult
from assistant_gateway.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Default execution timeout in seconds
DEFAULT_TIMEOUT = 30.0

# Argument key identity-scoped tools read the caller id from
IDENTITY_FIELD = "userId"

TOOL_NOT_FOUND_MESSAGE = "tool not found"


class ToolExecutor:
    """
    Executor for the tool calls of one assistant message.

    Attributes:
        registry: The ToolRegistry to resolve tools from.
        timeout: Maximum execution time per tool call, in seconds.

    Example:
        >>> executor = ToolExecutor(registry=registry)
        >>> results = await executor.dispatch(tool_calls, user_id="u1")
        >>> assert [r.tool_call_id for r in results] == [c.id for c in tool_calls]
    """

    def __init__(self, registry: ToolRegistry, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the executor with a registry.

        Args:
            registry: The ToolRegistry to use for tool lookup.
            timeout: Maximum execution time in seconds (default: 30).
        """
        self.registry = registry
        self.timeout = timeout

    # =========================================================================
    # dispatch()
    # =========================================================================

    async def dispatch(
        self, tool_calls: list[ToolCall], user_id: Optional[str] = None
    ) -> list[ToolResult]:
        """
        Execute tool calls sequentially, in request order.

        The output has exactly one ToolResult per input call, in the same
        order and with the same ids, whatever happens to the individual calls.

        Args:
            tool_calls: Tool calls from the assistant message.
            user_id: Caller identity, injected into identity-scoped tools.

        Returns:
            List of ToolResults in the same order as ``tool_calls``.
        """
        results: list[ToolResult] = []
        for tool_call in tool_calls:
            results.append(await self.execute(tool_call, user_id=user_id))
        return results

    # =========================================================================
    # execute()
    # =========================================================================

    async def execute(
        self, tool_call: ToolCall, user_id: Optional[str] = None
    ) -> ToolResult:
        """
        Execute a single tool call.

        Never raises for tool-level problems: an unknown tool, unparseable
        arguments, a raising handler or a timeout all produce an error result.

        Args:
            tool_call: The tool call to run.
            user_id: Caller identity (may be None).

        Returns:
            ToolResult with the tool's payload or an {"error": ...} payload.
        """
        tool_name = tool_call.name
        tool_call_id = tool_call.id

        tool = self.registry.find(tool_name)
        if tool is None:
            error = ToolNotFoundError(tool_name)
            logger.error(f"{error.message} (call {tool_call_id})")
            return ToolResult.failure(tool_call_id, TOOL_NOT_FOUND_MESSAGE)

        logger.info(f"Executing function: {tool_name} (call {tool_call_id})")
        try:
            arguments = self._parse_arguments(tool_call)
            arguments = self._inject_identity(tool, arguments, user_id)
            payload = await self._execute_with_timeout(tool.handler, arguments)
        except asyncio.TimeoutError:
            logger.warning(f"Tool {tool_name} timed out after {self.timeout}s")
            return ToolResult.failure(
                tool_call_id,
                f"Error executing {tool_name}: timed out after {self.timeout}s",
            )
        except Exception as e:
            logger.error(f"Error executing function {tool_name}: {e}")
            return ToolResult.failure(tool_call_id, f"Error executing {tool_name}: {e}")

        return ToolResult.success(tool_call_id, self._to_jsonable(payload))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _parse_arguments(self, tool_call: ToolCall) -> dict[str, Any]:
        """
        Decode the model's JSON arguments.

        Raises:
            ToolExecutionError: If the arguments are not a JSON object.
        """
        try:
            arguments = json.loads(tool_call.arguments or "{}")
        except json.JSONDecodeError as e:
            raise ToolExecutionError(
                f"invalid JSON arguments ({e.msg})",
                tool_name=tool_call.name,
                tool_call_id=tool_call.id,
            ) from e

        if not isinstance(arguments, dict):
            raise ToolExecutionError(
                "arguments must be a JSON object",
                tool_name=tool_call.name,
                tool_call_id=tool_call.id,
            )
        logger.debug(f"Function {tool_call.name} argument keys: {sorted(arguments)}")
        return arguments

    def _inject_identity(
        self,
        tool: RegisteredTool,
        arguments: dict[str, Any],
        user_id: Optional[str],
    ) -> dict[str, Any]:
        """Add the caller id for identity-scoped tools when one is known."""
        if tool.requires_identity and user_id:
            return {**arguments, IDENTITY_FIELD: user_id}
        return arguments

    async def _execute_with_timeout(
        self, handler: Any, arguments: dict[str, Any]
    ) -> Any:
        """
        Execute a handler with timeout protection.

        Async handlers are awaited; sync handlers run in the default executor
        so they do not block the event loop.

        Raises:
            asyncio.TimeoutError: If execution exceeds the timeout.
        """
        if inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
            getattr(handler, "__call__", None)
        ):
            return await asyncio.wait_for(handler(arguments), timeout=self.timeout)

        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, functools.partial(handler, arguments))
        result = await asyncio.wait_for(future, timeout=self.timeout)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout=self.timeout)
        return result

    @staticmethod
    def _to_jsonable(payload: Any) -> Any:
        """Dump pydantic results so the payload serializes as plain JSON."""
        if isinstance(payload, BaseModel):
            return payload.model_dump(mode="json")
        return payload
