"""
Provider Base Interface

This module defines the abstract base class for model provider adapters.
The conversation orchestrator depends only on this interface.

Design Pattern:
- Ports and Adapters (Hexagonal Architecture)
- LLMProvider serves as the "port" (interface)
- Concrete providers (openai.py, fake.py) serve as "adapters"
"""

from abc import ABC, abstractmethod

from assistant_gateway.models.requests import ChatCompletionRequest
from assistant_gateway.models.responses import ChatCompletionResponse


class LLMProvider(ABC):
    """
    Abstract base class for model provider adapters.

    Pattern: ABC for interface contracts

    Attributes:
        name: Provider identifier used in logs and errors.

    Methods:
        complete: Non-streaming chat completion

    Example:
        >>> class EchoProvider(LLMProvider):
        ...     name = "echo"
        ...
        ...     async def complete(self, request):
        ...         ...
    """

    name: str = "base"

    @abstractmethod
    async def complete(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """
        Generate a chat completion response.

        Args:
            request: The chat completion request containing messages,
                model identifier, and optional parameters (temperature,
                max_tokens, tools, tool_choice).

        Returns:
            ChatCompletionResponse: The complete response. ``usage`` may be
                None when the provider does not report token counts.

        Raises:
            ModelCallError: If the provider call fails for any reason.
        """
        ...
