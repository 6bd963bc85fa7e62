"""
Fixtures for the identity-scoped Google tools.

``google_backend(handler)`` installs a tool context whose HTTP clients answer
every request through ``handler`` and records what was sent.
"""

from typing import Callable

import httpx
import pytest

from assistant_gateway.clients.http import create_http_client
from assistant_gateway.clients.tokens import StaticTokenProvider
from assistant_gateway.core.config import Settings
from assistant_gateway.tools.context import ToolContext, configure_tool_context

Handler = Callable[[httpx.Request], httpx.Response]

GOOGLE_API_BASE_URL = "https://google.test"
SHEETS_API_BASE_URL = "https://sheets.test"


class RecordingTransport:
    """Collects requests and answers them through a handler."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


@pytest.fixture
def google_backend(token_provider: StaticTokenProvider) -> Callable[[Handler], RecordingTransport]:
    """Install a tool context whose HTTP calls are answered by ``handler``."""
    settings = Settings(
        google_api_base_url=GOOGLE_API_BASE_URL,
        google_sheets_base_url=SHEETS_API_BASE_URL,
    )

    def install(handler: Handler) -> RecordingTransport:
        transport = RecordingTransport(handler)

        def factory(base_url: str, headers: dict[str, str]) -> httpx.AsyncClient:
            return create_http_client(
                base_url=base_url,
                headers=headers,
                transport=httpx.MockTransport(transport),
            )

        configure_tool_context(
            ToolContext(
                token_provider=token_provider, settings=settings, http_client_factory=factory
            )
        )
        return transport

    return install
