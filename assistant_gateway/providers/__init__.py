"""
Providers Package - model provider port and adapters.

- base: LLMProvider abstract interface
- openai: OpenAI chat-completions adapter
- fake: scripted, network-free adapter for development and tests
"""

from assistant_gateway.providers.base import LLMProvider
from assistant_gateway.providers.fake import FakeProvider, tool_call, tool_calls_message
from assistant_gateway.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "FakeProvider",
    "tool_call",
    "tool_calls_message",
]
