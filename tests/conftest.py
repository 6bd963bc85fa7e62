"""
Pytest configuration and shared fixtures.

This configuration sets up:
- Test markers for categorization
- Settings safe for tests (fake provider, short deadlines)
- Registry, provider and token provider fixtures
- Isolation of the process-wide tool context between tests
"""

import sys
from pathlib import Path
from typing import Any

import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from assistant_gateway.clients.tokens import GOOGLE_PROVIDER_KEY, StaticTokenProvider  # noqa: E402
from assistant_gateway.core.config import Settings  # noqa: E402
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition  # noqa: E402
from assistant_gateway.providers.fake import FakeProvider  # noqa: E402
from assistant_gateway.tools.context import reset_tool_context  # noqa: E402
from assistant_gateway.tools.registry import ToolRegistry  # noqa: E402


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: tests for individual components
    - integration: tests wiring several components through the HTTP app
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for service interactions")


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_tool_context():
    """Reset the process-wide tool context around every test."""
    reset_tool_context()
    yield
    reset_tool_context()


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings configured for testing.

    Uses the fake provider, no API key and short deadlines.
    """
    return Settings(
        service_name="assistant-gateway-test",
        environment="development",
        log_level="DEBUG",
        openai_api_key="",
        use_fake_provider=True,
        default_model="gpt-5-nano",
        turn_timeout_seconds=5.0,
        tool_timeout_seconds=2.0,
    )


# =============================================================================
# Registry and Tools
# =============================================================================


@pytest.fixture
def registry() -> ToolRegistry:
    """Create a fresh ToolRegistry for each test."""
    return ToolRegistry()


@pytest.fixture
def echo_tool() -> RegisteredTool:
    """A pure tool echoing its arguments back."""

    async def handler(args: dict[str, Any]) -> dict[str, Any]:
        return {"echo": args}

    return RegisteredTool(
        definition=ToolDefinition(
            name="echo",
            description="Echo the arguments back",
            schema={
                "type": "object",
                "properties": {"text": {"type": "string"}},
                "required": ["text"],
            },
        ),
        handler=handler,
    )


@pytest.fixture
def identity_tool() -> RegisteredTool:
    """A tool declaring it needs the caller id; returns what it received."""

    async def handler(args: dict[str, Any]) -> dict[str, Any]:
        return {"received": args}

    return RegisteredTool(
        definition=ToolDefinition(
            name="whoami",
            description="Report the caller",
            schema={"type": "object", "properties": {}},
            requires_identity=True,
        ),
        handler=handler,
    )


# =============================================================================
# Providers
# =============================================================================


@pytest.fixture
def fake_provider() -> FakeProvider:
    """A fake provider with an empty script."""
    return FakeProvider()


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    """Token provider holding a Google token for user 'u1'."""
    return StaticTokenProvider({("u1", GOOGLE_PROVIDER_KEY): "test-access-token"})
