"""
Custom exceptions for the Assistant Gateway.

This module provides the exception hierarchy for the gateway. All exceptions
inherit from AssistantGatewayException and carry an error code so the HTTP
boundary and the logs can classify failures consistently.

Propagation policy:
- RegistrationError / SchemaValidationError: logged, tool excluded
- ToolNotFoundError / ToolExecutionError: converted to a tool message payload
- ModelCallError / TurnTimeoutError: fatal to the turn, surfaced to the caller
- RequestValidationError: raised at the HTTP boundary only
"""

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for Assistant Gateway exceptions.

    These codes identify error kinds across the API and in logging.
    """

    GATEWAY_ERROR = "GATEWAY_ERROR"
    REGISTRATION_ERROR = "REGISTRATION_ERROR"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    TOOL_EXECUTION_ERROR = "TOOL_EXECUTION_ERROR"
    MODEL_CALL_ERROR = "MODEL_CALL_ERROR"
    TIMEOUT = "TIMEOUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class AssistantGatewayException(Exception):
    """
    Base exception for all Assistant Gateway errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GATEWAY_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Registry Errors
# =============================================================================


class RegistrationError(AssistantGatewayException):
    """
    Raised when a tool definition is malformed at registration time.

    Attributes:
        tool_name: Name of the rejected tool, if it had one.
    """

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        error_code: str = ErrorCode.REGISTRATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name


class SchemaValidationError(AssistantGatewayException):
    """
    Raised when a registered tool fails re-validation in the schema adapter.

    The tool is hidden from the model for the current turn only.

    Attributes:
        tool_name: Name of the tool that failed re-validation.
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        error_code: str = ErrorCode.SCHEMA_VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name


class ToolNotFoundError(AssistantGatewayException):
    """Raised when a requested tool is not found in the registry."""

    def __init__(
        self,
        tool_name: str,
        error_code: str = ErrorCode.TOOL_NOT_FOUND,
        **kwargs: Any,
    ) -> None:
        super().__init__(f"Tool not found: {tool_name}", error_code, **kwargs)
        self.tool_name = tool_name


# =============================================================================
# Execution Errors
# =============================================================================


class ToolExecutionError(AssistantGatewayException):
    """
    Exception for tool execution failures.

    Raised when a tool fails to execute, including timeouts and argument
    parse failures. The dispatch executor turns it into an error payload.

    Attributes:
        tool_name: Name of the tool that failed.
        tool_call_id: ID of the tool call (for correlation).
    """

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        tool_call_id: str | None = None,
        error_code: str = ErrorCode.TOOL_EXECUTION_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the tool execution error.

        Args:
            message: Human-readable error message.
            tool_name: Name of the tool that failed (optional).
            tool_call_id: ID of the tool call (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id


class ModelCallError(AssistantGatewayException):
    """
    Exception for failed language-model API calls.

    Raised when communication with the model provider fails, including
    network, authentication and quota errors. Fatal to the turn.

    Attributes:
        provider: Name of the provider (e.g., "openai").
        status_code: HTTP status code from the provider API (if applicable).
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = ErrorCode.MODEL_CALL_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the model call error.

        Args:
            message: Human-readable error message.
            provider: Name of the model provider.
            status_code: HTTP status code from provider (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.status_code = status_code


class TurnTimeoutError(AssistantGatewayException):
    """
    Raised when a conversation turn exceeds its deadline.

    Attributes:
        timeout_seconds: The deadline that was exceeded.
    """

    def __init__(
        self,
        timeout_seconds: float,
        error_code: str = ErrorCode.TIMEOUT,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Turn exceeded {timeout_seconds}s deadline", error_code, **kwargs
        )
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Boundary Errors
# =============================================================================


class RequestValidationError(AssistantGatewayException):
    """
    Exception for inbound request validation errors.

    Named RequestValidationError to keep it apart from pydantic's and
    FastAPI's own validation errors, which the boundary translates into it.

    Attributes:
        details: Per-field validation messages.
    """

    def __init__(
        self,
        message: str,
        details: list[dict[str, str]] | None = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.details = details or []
