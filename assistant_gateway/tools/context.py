"""
Tool Context

Collaborators that built-in tools need at execution time: the token provider
for identity-scoped tools, the HTTP client factory and the settings. The
context is configured once in the application lifespan, before discovery, and
read by tool handlers when they run.

Pattern: Singleton access with explicit configure/reset (init-once lifecycle)
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import httpx

from assistant_gateway.clients.http import create_http_client
from assistant_gateway.clients.tokens import StaticTokenProvider, TokenProvider
from assistant_gateway.core.config import Settings, get_settings

# (base_url, headers) -> client
HttpClientFactory = Callable[[str, dict[str, str]], httpx.AsyncClient]


@dataclass
class ToolContext:
    """
    Execution-time collaborators for built-in tools.

    Attributes:
        token_provider: Resolves per-user access tokens.
        settings: Application settings.
        http_client_factory: Builds the client used for outbound API calls.
    """

    token_provider: TokenProvider
    settings: Settings = field(default_factory=get_settings)
    http_client_factory: Optional[HttpClientFactory] = None

    def http_client(self, base_url: str, headers: dict[str, str]) -> httpx.AsyncClient:
        """Create an HTTP client for one tool execution."""
        if self.http_client_factory is not None:
            return self.http_client_factory(base_url, headers)
        return create_http_client(
            base_url=base_url,
            timeout_seconds=self.settings.google_api_timeout_seconds,
            headers=headers,
        )


_context: Optional[ToolContext] = None


def configure_tool_context(context: ToolContext) -> None:
    """Install the tool context (called once at startup)."""
    global _context
    _context = context


def get_tool_context() -> ToolContext:
    """
    Get the configured tool context.

    Falls back to an empty StaticTokenProvider when nothing was configured, so
    identity-scoped tools fail with a missing-token error rather than crash.
    """
    global _context
    if _context is None:
        _context = ToolContext(token_provider=StaticTokenProvider())
    return _context


def reset_tool_context() -> None:
    """
    Reset the tool context.

    Primarily used for testing to ensure a clean state.
    """
    global _context
    _context = None
