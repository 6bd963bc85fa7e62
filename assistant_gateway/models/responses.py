"""
Response Models

This module contains Pydantic models for provider completions and for the
outcome of a conversation turn as returned by the HTTP boundary.

Anti-Patterns Avoided:
- Optional fields use Optional[T] with explicit None default
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from assistant_gateway.models.requests import Message


# =============================================================================
# Usage Model
# =============================================================================


class Usage(BaseModel):
    """
    Token usage statistics.

    Attributes:
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used
    """

    prompt_tokens: int = Field(..., description="Tokens in prompt")
    completion_tokens: int = Field(..., description="Tokens in completion")
    total_tokens: int = Field(..., description="Total tokens")


# =============================================================================
# Provider Completion Models
# =============================================================================


class ChoiceMessage(BaseModel):
    """
    Message within a choice response.

    Attributes:
        role: Message role (always 'assistant' for completions)
        content: Response content (can be None for tool calls)
        tool_calls: Optional list of tool calls in OpenAI format
    """

    role: str = Field(default="assistant", description="Message role")
    content: Optional[str] = Field(default=None, description="Response content")
    tool_calls: Optional[list[dict[str, Any]]] = Field(
        default=None, description="Tool calls"
    )

    def to_message(self) -> Message:
        """Convert to a conversation message, preserving tool calls verbatim."""
        return Message(
            role="assistant",
            content=self.content,
            tool_calls=self.tool_calls or None,
        )


class Choice(BaseModel):
    """
    A single completion choice.

    Attributes:
        index: Index of this choice
        message: The completion message
        finish_reason: Why the completion stopped
    """

    index: int = Field(..., description="Choice index")
    message: ChoiceMessage = Field(..., description="Completion message")
    finish_reason: Optional[str] = Field(
        default=None, description="Completion stop reason"
    )


class ChatCompletionResponse(BaseModel):
    """
    Chat completion response model (OpenAI-compatible).

    Attributes:
        id: Unique response identifier
        created: Unix timestamp of creation
        model: Model used for completion
        choices: List of completion choices
        usage: Token usage statistics, when the provider reports them
    """

    id: str = Field(..., description="Response ID")
    object: str = Field(default="chat.completion", description="Object type")
    created: int = Field(..., description="Creation timestamp")
    model: str = Field(..., description="Model used")
    choices: list[Choice] = Field(..., description="Completion choices")
    usage: Optional[Usage] = Field(default=None, description="Token usage")

    @property
    def message(self) -> ChoiceMessage:
        """The first choice's message; an empty assistant message if none."""
        if not self.choices:
            return ChoiceMessage()
        return self.choices[0].message


# =============================================================================
# Turn Outcome Models
# =============================================================================


class TurnData(BaseModel):
    """
    Payload of a successful turn.

    Attributes:
        response: Final natural-language answer ("" when the model returned no content).
        model: Model used for the turn.
        usage: Token usage of the call that produced the answer.
        function_call_count: Number of tool calls dispatched.
        conversation: Full message sequence of the turn (empty on fallback).
        timestamp: ISO-8601 completion time.
    """

    response: str = Field(default="", description="Final answer")
    model: str = Field(..., description="Model used")
    usage: Optional[Usage] = Field(default=None, description="Token usage")
    function_call_count: int = Field(
        default=0, alias="functionCallCount", description="Dispatched tool calls"
    )
    conversation: list[Message] = Field(
        default_factory=list, description="Conversation messages"
    )
    timestamp: str = Field(..., description="ISO-8601 timestamp")

    model_config = {"populate_by_name": True}


class ErrorInfo(BaseModel):
    """
    Error description returned for a failed turn.

    Attributes:
        message: Human-readable summary.
        details: Underlying error message, if any.
        code: Machine-readable error code.
    """

    message: str
    details: Optional[str] = None
    code: Optional[str] = None

    @field_validator("code", mode="before")
    @classmethod
    def code_as_value(cls, v: Any) -> Any:
        """Store enum error codes by their plain value."""
        if isinstance(v, Enum):
            return v.value
        return v


class OrchestrationOutcome(BaseModel):
    """
    Result of one orchestration run: either data or an error.

    Attributes:
        success: Whether the turn completed.
        data: Turn payload on success.
        error: Error description on failure.
    """

    success: bool
    data: Optional[TurnData] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def ok(cls, data: TurnData) -> "OrchestrationOutcome":
        """Build a successful outcome."""
        return cls(success=True, data=data)

    @classmethod
    def failed(
        cls, message: str, details: Optional[str] = None, code: Optional[str] = None
    ) -> "OrchestrationOutcome":
        """Build a failed outcome."""
        return cls(
            success=False,
            error=ErrorInfo(message=message, details=details, code=code),
        )
