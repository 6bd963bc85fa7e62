"""
Request Models

This module contains Pydantic models for the inbound message request and for
the chat completion requests sent to model providers.

Anti-Patterns Avoided:
- Optional fields use Optional[T] with explicit None default
- Validation errors have clear context messages
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


MAX_MESSAGE_LENGTH = 1000


# =============================================================================
# Message Models
# =============================================================================


class Message(BaseModel):
    """
    Chat message model.

    One entry of the conversation a turn builds up. Order is significant.

    Attributes:
        role: Message role (system, user, assistant, tool)
        content: Message content (can be None for tool calls)
        name: Optional name for the message author
        tool_calls: Optional list of tool calls (for assistant messages)
        tool_call_id: Optional tool call ID (for tool messages)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[str] = None
    name: Optional[str] = None
    tool_calls: Optional[list[dict[str, Any]]] = None
    tool_call_id: Optional[str] = None


# =============================================================================
# Tool Models
# =============================================================================


class FunctionDefinition(BaseModel):
    """Function definition for tool calling."""

    name: str
    description: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None


class Tool(BaseModel):
    """Tool definition for function calling."""

    type: Literal["function"] = "function"
    function: FunctionDefinition


# =============================================================================
# ChatCompletionRequest
# =============================================================================


class ChatCompletionRequest(BaseModel):
    """
    Chat completion request sent to a model provider.

    Required Fields:
        model: Model identifier
        messages: List of messages in the conversation

    Optional Fields:
        temperature: Sampling temperature (0-2)
        max_tokens: Maximum tokens to generate
        tools: List of tools available for function calling
        tool_choice: Tool selection strategy ("auto", "none", ...)
    """

    model: str = Field(..., description="Model identifier")
    messages: list[Message] = Field(..., description="Conversation messages")

    temperature: Optional[float] = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )
    max_tokens: Optional[int] = Field(
        default=None, gt=0, description="Maximum tokens to generate"
    )
    tools: Optional[list[Tool]] = Field(
        default=None, description="Tools for function calling"
    )
    tool_choice: Optional[str | dict[str, Any]] = Field(
        default=None, description="Tool selection strategy"
    )

    @field_validator("messages")
    @classmethod
    def messages_not_empty(cls, v: list[Message]) -> list[Message]:
        """Validate that messages list is not empty."""
        if not v:
            raise ValueError("messages must not be empty")
        return v


# =============================================================================
# MessageRequest - POST /api/message-llm
# =============================================================================


class MessageRequest(BaseModel):
    """
    Inbound request for one conversation turn.

    Attributes:
        message: The user's message (1..1000 characters).
        user_id: Caller identity, sent as ``userId``.
        model: Optional model identifier; the configured default applies
            when absent.
    """

    message: str = Field(
        ...,
        min_length=1,
        max_length=MAX_MESSAGE_LENGTH,
        description="User message",
    )
    user_id: str = Field(..., alias="userId", min_length=1, description="Caller id")
    model: Optional[str] = Field(default=None, description="Model identifier")

    model_config = {"populate_by_name": True}

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        """Reject whitespace-only messages."""
        if not v.strip():
            raise ValueError("Message is required")
        return v

    @field_validator("user_id")
    @classmethod
    def user_id_not_blank(cls, v: str) -> str:
        """Strip and require a non-blank user id."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("User ID is required")
        return stripped

    @field_validator("model")
    @classmethod
    def model_not_blank(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank model as absent."""
        if v is not None and not v.strip():
            return None
        return v
