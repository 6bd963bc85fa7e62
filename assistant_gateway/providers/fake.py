"""
Fake LLM Provider - Test Double Implementation

This module provides a FakeProvider that implements the real LLMProvider
interface without making network calls.

This is NOT mocking - it's a proper implementation of the interface. Besides
tests, the FakeProvider serves local development and demos, but only when
``use_fake_provider`` is set explicitly.

Responses can be scripted: each call to complete() consumes the next scripted
entry, which may be a full ChatCompletionResponse, a ChoiceMessage, a plain
string, or an exception to raise. Once the script is exhausted the provider
answers with a deterministic echo of the last user message.
"""

import json
import time
import uuid
from collections import deque
from typing import Any, Iterable, Optional, Union

from assistant_gateway.models.requests import ChatCompletionRequest
from assistant_gateway.models.responses import (
    ChatCompletionResponse,
    Choice,
    ChoiceMessage,
    Usage,
)
from assistant_gateway.providers.base import LLMProvider

ScriptedResponse = Union[ChatCompletionResponse, ChoiceMessage, str, BaseException]


def tool_call(call_id: str, name: str, arguments: Any = None) -> dict[str, Any]:
    """
    Build an OpenAI-format tool call for scripting.

    ``arguments`` may be a dict (encoded to JSON) or a raw string, which is
    passed through untouched so malformed JSON can be scripted too.
    """
    if arguments is None:
        encoded = "{}"
    elif isinstance(arguments, str):
        encoded = arguments
    else:
        encoded = json.dumps(arguments)
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": encoded},
    }


def tool_calls_message(*calls: dict[str, Any]) -> ChoiceMessage:
    """Assistant message requesting the given tool calls."""
    return ChoiceMessage(role="assistant", content=None, tool_calls=list(calls))


class FakeProvider(LLMProvider):
    """
    Fake LLM provider for testing and local development.

    Implements the full LLMProvider interface with deterministic responses.

    Attributes:
        name: Provider identifier
        response_content: Content of unscripted replies
        error_on_complete: Exception raised on every complete() call
        complete_calls: Requests received, for test assertions

    Example:
        >>> provider = FakeProvider(responses=[
        ...     tool_calls_message(tool_call("call_1", "getWeather", {"location": "Paris"})),
        ...     "It is 22°C in Paris.",
        ... ])
        >>> first = await provider.complete(request)
        >>> first.message.tool_calls[0]["function"]["name"]
        'getWeather'
    """

    def __init__(
        self,
        name: str = "fake",
        response_content: str = "Fake response for testing",
        error_on_complete: Optional[BaseException] = None,
        responses: Optional[Iterable[ScriptedResponse]] = None,
        with_usage: bool = True,
    ) -> None:
        self.name = name
        self.response_content = response_content
        self.error_on_complete = error_on_complete
        self.with_usage = with_usage
        self._script: deque[ScriptedResponse] = deque(responses or [])

        # Track calls for test assertions
        self.complete_calls: list[ChatCompletionRequest] = []

    def queue(self, *responses: ScriptedResponse) -> None:
        """Append scripted responses."""
        self._script.extend(responses)

    @property
    def pending(self) -> int:
        """Number of scripted responses not yet consumed."""
        return len(self._script)

    async def complete(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """
        Return the next scripted response, or a deterministic echo.

        Raises:
            Exception: If error_on_complete is set, or the next scripted
                entry is an exception.
        """
        self.complete_calls.append(request)

        if self.error_on_complete is not None:
            raise self.error_on_complete

        scripted = self._script.popleft() if self._script else None
        if isinstance(scripted, BaseException):
            raise scripted
        if isinstance(scripted, ChatCompletionResponse):
            return scripted

        if isinstance(scripted, ChoiceMessage):
            message = scripted
        elif isinstance(scripted, str):
            message = ChoiceMessage(role="assistant", content=scripted)
        else:
            message = ChoiceMessage(
                role="assistant", content=self._generate_response_content(request)
            )

        return self._build_response(request, message)

    def _build_response(
        self, request: ChatCompletionRequest, message: ChoiceMessage
    ) -> ChatCompletionResponse:
        usage = None
        if self.with_usage:
            # Rough approximation: ~2 tokens per word
            prompt_tokens = sum(
                len((msg.content or "").split()) for msg in request.messages
            ) * 2
            completion_tokens = len((message.content or "").split()) * 2
            usage = Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            )

        return ChatCompletionResponse(
            id=f"chatcmpl-fake-{uuid.uuid4().hex[:12]}",
            object="chat.completion",
            created=int(time.time()),
            model=request.model,
            choices=[
                Choice(
                    index=0,
                    message=message,
                    finish_reason="tool_calls" if message.tool_calls else "stop",
                )
            ],
            usage=usage,
        )

    def _generate_response_content(self, request: ChatCompletionRequest) -> str:
        """
        Generate response content based on the request.

        Can be overridden in subclasses for custom behavior.
        """
        for msg in reversed(request.messages):
            if msg.role == "user" and msg.content:
                return f"{self.response_content}: {msg.content[:50]}"
        return self.response_content
