"""
Models Package - Pydantic models for the Assistant Gateway.

This package contains:
- requests: inbound message request and provider request models
- responses: provider completion and turn outcome models
- domain: tool definitions, calls and results
"""

from assistant_gateway.models.domain import (
    FunctionSpec,
    RegisteredTool,
    ToolCall,
    ToolDefinition,
    ToolResult,
)
from assistant_gateway.models.requests import (
    ChatCompletionRequest,
    FunctionDefinition,
    Message,
    MessageRequest,
    Tool,
)
from assistant_gateway.models.responses import (
    ChatCompletionResponse,
    Choice,
    ChoiceMessage,
    ErrorInfo,
    OrchestrationOutcome,
    TurnData,
    Usage,
)

__all__ = [
    # Domain
    "ToolDefinition",
    "RegisteredTool",
    "FunctionSpec",
    "ToolCall",
    "ToolResult",
    # Requests
    "Message",
    "FunctionDefinition",
    "Tool",
    "ChatCompletionRequest",
    "MessageRequest",
    # Responses
    "Usage",
    "ChoiceMessage",
    "Choice",
    "ChatCompletionResponse",
    "TurnData",
    "ErrorInfo",
    "OrchestrationOutcome",
]
