"""
Core module for the Assistant Gateway.

This module contains configuration and the exception hierarchy.
"""

from assistant_gateway.core.config import Settings, get_settings
from assistant_gateway.core.exceptions import (
    AssistantGatewayException,
    ErrorCode,
    ModelCallError,
    RegistrationError,
    RequestValidationError,
    SchemaValidationError,
    ToolExecutionError,
    ToolNotFoundError,
    TurnTimeoutError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "AssistantGatewayException",
    "RegistrationError",
    "SchemaValidationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ModelCallError",
    "TurnTimeoutError",
    "RequestValidationError",
]
