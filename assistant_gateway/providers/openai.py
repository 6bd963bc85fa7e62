"""
OpenAI Provider

This module implements the OpenAI provider adapter. Request and response
models are already in OpenAI's chat-completions shape, so the adapter mostly
renders requests into SDK keyword arguments and maps SDK responses and
errors back into the gateway's models.

Design Patterns:
- Ports and Adapters: OpenAIProvider implements LLMProvider interface
- Bounded retry with exponential backoff (disabled by default: one attempt)
- Adapter Pattern: Transforms OpenAI SDK responses to our response models
"""

import asyncio
import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from assistant_gateway.core.exceptions import ModelCallError
from assistant_gateway.models.requests import ChatCompletionRequest, Message
from assistant_gateway.models.responses import (
    ChatCompletionResponse,
    Choice,
    ChoiceMessage,
    Usage,
)
from assistant_gateway.providers.base import LLMProvider

logger = logging.getLogger(__name__)

PROVIDER_NAME = "openai"

MISSING_KEY_MESSAGE = "OpenAI API key is not configured"

# Errors that never succeed on a second attempt
_NON_RETRYABLE = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.BadRequestError,
    openai.NotFoundError,
)


class OpenAIProvider(LLMProvider):
    """
    OpenAI chat-completions provider adapter.

    Pattern: Ports and Adapters (Hexagonal Architecture)

    Args:
        api_key: OpenAI API key.
        base_url: Optional custom endpoint URL (proxies, compatible servers).
        max_attempts: Attempts per call (default: 1, no retry).
        retry_delay: Initial delay between attempts (exponential backoff).
        client: Pre-built AsyncOpenAI client (tests inject a mock here).

    Without an API key or client the provider still constructs, and every
    complete() call fails with ModelCallError.

    Example:
        >>> provider = OpenAIProvider(api_key="sk-...")
        >>> response = await provider.complete(request)
        >>> print(response.message.content)
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        max_attempts: int = 1,
        retry_delay: float = 1.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay

        if client is None and api_key:
            client_kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
            if base_url:
                client_kwargs["base_url"] = base_url
            client = AsyncOpenAI(**client_kwargs)
        self._client = client

    # =========================================================================
    # complete()
    # =========================================================================

    async def complete(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        Generate a chat completion response.

        Args:
            request: The chat completion request.

        Returns:
            ChatCompletionResponse with completion results.

        Raises:
            ModelCallError: On any API, network or decoding failure, or when
                no API key is configured.
        """
        if self._client is None:
            raise ModelCallError(MISSING_KEY_MESSAGE, provider=PROVIDER_NAME)

        kwargs = self._build_request_kwargs(request)
        response = await self._execute_with_retry(
            self._client.chat.completions.create,
            **kwargs,
        )
        return self._transform_response(response)

    # =========================================================================
    # Retry Logic
    # =========================================================================

    async def _execute_with_retry(self, func, **kwargs) -> Any:
        """
        Execute a function with bounded retry and exponential backoff.

        Raises:
            ModelCallError: Immediately on non-retryable errors, otherwise
                once the attempts are exhausted.
        """
        attempt = 0
        while True:
            try:
                return await func(**kwargs)
            except _NON_RETRYABLE as e:
                raise self._to_model_call_error(e) from e
            except Exception as e:
                attempt += 1
                if attempt >= self._max_attempts:
                    raise self._to_model_call_error(e) from e
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"OpenAI call failed (attempt {attempt}/{self._max_attempts}), "
                    f"retrying in {delay}s: {e}"
                )
                await asyncio.sleep(delay)

    @staticmethod
    def _to_model_call_error(error: Exception) -> ModelCallError:
        status_code = getattr(error, "status_code", None)
        return ModelCallError(str(error), provider=PROVIDER_NAME, status_code=status_code)

    # =========================================================================
    # Request Building
    # =========================================================================

    def _transform_message(self, msg: Message) -> dict[str, Any]:
        """Render a Message as an API message dict, omitting unset fields."""
        msg_dict: dict[str, Any] = {"role": msg.role}

        # Assistant messages carrying tool calls still need the content key
        if msg.content is not None or msg.role == "assistant":
            msg_dict["content"] = msg.content
        if msg.name is not None:
            msg_dict["name"] = msg.name
        if msg.tool_calls is not None:
            msg_dict["tool_calls"] = msg.tool_calls
        if msg.tool_call_id is not None:
            msg_dict["tool_call_id"] = msg.tool_call_id

        return msg_dict

    def _build_request_kwargs(self, request: ChatCompletionRequest) -> dict[str, Any]:
        """
        Build kwargs for the OpenAI API call from a request.

        GPT-5 models take ``max_completion_tokens`` instead of ``max_tokens``.
        """
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": [self._transform_message(msg) for msg in request.messages],
        }

        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            if request.model.startswith("gpt-5"):
                kwargs["max_completion_tokens"] = request.max_tokens
            else:
                kwargs["max_tokens"] = request.max_tokens

        if request.tools:
            kwargs["tools"] = [tool.model_dump(exclude_none=True) for tool in request.tools]
            if request.tool_choice is not None:
                kwargs["tool_choice"] = request.tool_choice

        return kwargs

    # =========================================================================
    # Response Transformation
    # =========================================================================

    def _transform_response(self, response: Any) -> ChatCompletionResponse:
        """
        Transform an OpenAI SDK response into our response model.

        Raises:
            ModelCallError: If the response cannot be decoded.
        """
        try:
            choices = []
            for choice in response.choices:
                tool_calls = None
                if choice.message.tool_calls:
                    tool_calls = [
                        {
                            "id": tc.id,
                            "type": tc.type,
                            "function": {
                                "name": tc.function.name,
                                "arguments": tc.function.arguments,
                            },
                        }
                        for tc in choice.message.tool_calls
                    ]

                choices.append(
                    Choice(
                        index=choice.index,
                        message=ChoiceMessage(
                            role=choice.message.role,
                            content=choice.message.content,
                            tool_calls=tool_calls,
                        ),
                        finish_reason=choice.finish_reason,
                    )
                )

            usage = None
            if response.usage is not None:
                usage = Usage(
                    prompt_tokens=response.usage.prompt_tokens,
                    completion_tokens=response.usage.completion_tokens,
                    total_tokens=response.usage.total_tokens,
                )

            return ChatCompletionResponse(
                id=response.id,
                object="chat.completion",
                created=response.created,
                model=response.model,
                choices=choices,
                usage=usage,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ModelCallError(
                f"Malformed completion response: {e}", provider=PROVIDER_NAME
            ) from e
