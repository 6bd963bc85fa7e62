"""
Shared plumbing for the identity-scoped Google tools.

Token resolution through the TokenProvider, one authenticated HTTP client per
execution, path-segment encoding for model-supplied ids and translation of
httpx failures into ToolExecutionError.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from assistant_gateway.clients.tokens import GOOGLE_PROVIDER_KEY
from assistant_gateway.core.exceptions import ToolExecutionError
from assistant_gateway.tools.context import get_tool_context

MISSING_TOKEN_MESSAGE = "No valid OAuth tokens found. Please authenticate with Google first."


async def resolve_access_token(user_id: Optional[str], tool_name: str) -> str:
    """
    Resolve the caller's Google access token.

    Raises:
        ToolExecutionError: If there is no user id or no usable token.
    """
    if not user_id:
        raise ToolExecutionError(MISSING_TOKEN_MESSAGE, tool_name=tool_name)
    token = await get_tool_context().token_provider.get_access_token(
        user_id, GOOGLE_PROVIDER_KEY
    )
    if not token:
        raise ToolExecutionError(MISSING_TOKEN_MESSAGE, tool_name=tool_name)
    return token


def open_client(token: str, base_url: Optional[str] = None) -> httpx.AsyncClient:
    """Bearer-authenticated client (default base: settings.google_api_base_url)."""
    context = get_tool_context()
    return context.http_client(
        base_url or context.settings.google_api_base_url,
        {"Authorization": f"Bearer {token}"},
    )


def path_segment(value: str, label: str, tool_name: str) -> str:
    """
    Percent-encode a model-supplied id as exactly one URL path segment.

    Raises:
        ToolExecutionError: For the dot segments "." and "..".
    """
    if value in (".", ".."):
        raise ToolExecutionError(f"Invalid {label}: {value}", tool_name=tool_name)
    return quote(value, safe="@")


def api_error(error: httpx.HTTPError, action: str, tool_name: str) -> ToolExecutionError:
    """Translate an httpx failure; status errors report only the status code."""
    if isinstance(error, httpx.HTTPStatusError):
        return ToolExecutionError(
            f"Failed to execute {action}: Google API returned {error.response.status_code}",
            tool_name=tool_name,
        )
    return ToolExecutionError(f"Failed to execute {action}: {error}", tool_name=tool_name)
