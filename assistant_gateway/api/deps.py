"""
API Dependencies

This module provides FastAPI dependency injection functions for the API layer.

The collaborators are built once in the application lifespan and stored on
``app.state``; these functions hand them to the routes. Tests override them
through FastAPI's dependency_overrides mechanism.
"""

from fastapi import Request

from assistant_gateway.core.config import Settings
from assistant_gateway.services.conversation import ConversationOrchestrator
from assistant_gateway.tools.registry import ToolRegistry


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_registry(request: Request) -> ToolRegistry:
    """The tool registry filled by startup discovery."""
    return request.app.state.registry


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    """The conversation orchestrator built at startup."""
    return request.app.state.orchestrator
