"""
Domain Models - Tool Definitions, Calls and Results

This module contains the internal domain models of the tool system: tool
definitions, registered tools with their handlers, the provider-facing
function specs, tool calls emitted by the model, and tool results.

Pattern: Domain models as value objects (frozen pydantic models)
Pattern: Results as values - a failed tool call is a ToolResult, not an exception

Note: These models are distinct from the request/response models in
requests.py and responses.py, which describe provider and HTTP payloads.
"""

import json
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from assistant_gateway.models.requests import FunctionDefinition, Tool


# =============================================================================
# ToolDefinition Model
# =============================================================================


class ToolDefinition(BaseModel):
    """
    Tool definition schema for tool registration.

    This is the metadata describing a tool: its name, what it does, optional
    usage guidance, and the JSON Schema for its parameters. It does not include
    the handler callable; see RegisteredTool for that.

    Pattern: Value object (identified by data, not identity)
    Pattern: JSON Schema for parameters (OpenAI function-calling compatible)

    Attributes:
        name: Unique tool identifier.
        description: Description shown to the model.
        instructions: Optional prose guidance for the system prompt; never
            sent as part of the function spec.
        parameters: JSON Schema defining the tool's input parameters. Also
            accepted under the ``schema`` key.
        requires_identity: Whether the caller's user id must be injected into
            the arguments before execution.

    Example:
        >>> tool = ToolDefinition(
        ...     name="getWeather",
        ...     description="Get current weather",
        ...     schema={
        ...         "type": "object",
        ...         "properties": {"location": {"type": "string"}},
        ...         "required": ["location"],
        ...     },
        ... )
    """

    name: str = Field(..., description="Unique tool identifier")
    description: str = Field(..., description="Description shown to the model")
    instructions: Optional[str] = Field(
        default=None, description="Usage guidance for the system prompt"
    )
    parameters: dict[str, Any] = Field(
        ..., alias="schema", description="JSON Schema for input parameters"
    )
    requires_identity: bool = Field(
        default=False, description="Inject the caller's userId before execution"
    )

    model_config = {"frozen": True, "populate_by_name": True}


# =============================================================================
# RegisteredTool Model
# =============================================================================


class RegisteredTool(BaseModel):
    """
    A tool with its definition and handler callable.

    The handler can be sync or async and receives the parsed arguments as a
    dict. Whatever it returns must be JSON-serializable.

    Attributes:
        definition: The tool's metadata.
        handler: Callable that executes the tool.

    Example:
        >>> async def weather(args: dict) -> dict:
        ...     return {"location": args["location"], "condition": "sunny"}
        ...
        >>> tool = RegisteredTool(definition=WEATHER_DEFINITION, handler=weather)
    """

    definition: ToolDefinition
    handler: Callable[..., Any] = Field(..., description="Tool execution callable")

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @property
    def name(self) -> str:
        """Get tool name from definition."""
        return self.definition.name

    @property
    def description(self) -> str:
        """Get tool description from definition."""
        return self.definition.description

    @property
    def parameters(self) -> dict[str, Any]:
        """Get tool parameters from definition."""
        return self.definition.parameters

    @property
    def instructions(self) -> Optional[str]:
        """Get tool instructions from definition."""
        return self.definition.instructions

    @property
    def requires_identity(self) -> bool:
        """Whether the tool is identity-scoped."""
        return self.definition.requires_identity


# =============================================================================
# FunctionSpec Model
# =============================================================================


class FunctionSpec(BaseModel):
    """
    Provider-facing projection of a ToolDefinition.

    Regenerated for every turn from the live registry; never mutated.

    Attributes:
        name: Function name the model will call.
        description: Description shown to the model.
        parameters: JSON Schema for the arguments.
    """

    name: str
    description: str
    parameters: dict[str, Any]

    model_config = {"frozen": True}

    def to_tool(self) -> Tool:
        """Wrap the function spec in the request-level Tool envelope."""
        return Tool(
            function=FunctionDefinition(
                name=self.name,
                description=self.description,
                parameters=self.parameters,
            )
        )


# =============================================================================
# ToolCall Model
# =============================================================================


class ToolCall(BaseModel):
    """
    A request from the model to execute a specific tool.

    Parsed from the tool_calls field of an assistant message. The arguments
    stay as the raw JSON string the model emitted; parsing happens in the
    dispatch executor so a malformed string becomes a per-call failure.

    Pattern: Command pattern (encapsulates a request as an object)

    Attributes:
        id: Unique identifier for this tool call.
        name: Name of the tool to execute.
        arguments: JSON-encoded arguments.
    """

    id: str = Field(..., description="Unique tool call identifier")
    name: str = Field(..., description="Name of tool to execute")
    arguments: str = Field(default="{}", description="JSON-encoded arguments")

    @classmethod
    def from_openai_format(cls, tool_call: dict[str, Any]) -> "ToolCall":
        """
        Parse a ToolCall from OpenAI's tool_calls format.

        Args:
            tool_call: OpenAI format tool call:
                {
                    "id": "call_xyz",
                    "type": "function",
                    "function": {
                        "name": "tool_name",
                        "arguments": "{\"arg\": \"value\"}"
                    }
                }

        Returns:
            ToolCall instance with the raw argument string.
        """
        function = tool_call.get("function") or {}
        arguments = function.get("arguments")
        if arguments is None or arguments == "":
            arguments = "{}"
        elif not isinstance(arguments, str):
            arguments = json.dumps(arguments)

        return cls(
            id=tool_call.get("id", ""),
            name=function.get("name", ""),
            arguments=arguments,
        )


# =============================================================================
# ToolResult Model
# =============================================================================


class ToolResult(BaseModel):
    """
    Result of executing one tool call.

    Always produced, one per ToolCall, even when the tool was not found or
    raised: the provider rejects a turn that leaves a tool_call_id unanswered.

    Attributes:
        tool_call_id: ID of the ToolCall this result responds to.
        payload: The tool's JSON-serializable result, or {"error": message}.
        is_error: Whether the result represents an error.

    Example:
        >>> ToolResult.failure("call_1", "tool not found").content
        '{"error": "tool not found"}'
    """

    tool_call_id: str = Field(..., description="ID of originating tool call")
    payload: Any = Field(default=None, description="Tool output or error object")
    is_error: bool = Field(default=False, description="Whether result is an error")

    @classmethod
    def success(cls, tool_call_id: str, payload: Any) -> "ToolResult":
        """Build a successful result."""
        return cls(tool_call_id=tool_call_id, payload=payload, is_error=False)

    @classmethod
    def failure(cls, tool_call_id: str, message: str) -> "ToolResult":
        """Build an error result with an {"error": message} payload."""
        return cls(tool_call_id=tool_call_id, payload={"error": message}, is_error=True)

    @property
    def content(self) -> str:
        """JSON-encoded payload, as sent back to the model."""
        return json.dumps(self.payload, default=str)

    def to_message_dict(self) -> dict[str, Any]:
        """
        Convert to OpenAI message format.

        Returns:
            {"role": "tool", "tool_call_id": "call_xyz", "content": "<json>"}
        """
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "content": self.content,
        }
