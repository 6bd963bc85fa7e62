"""
Conversation Orchestrator

This module runs one user turn through the two-phase tool protocol:

    INIT -> TOOLS_PREPARED -> MODEL_CALL_1 -> NO_TOOLS_REQUESTED -> DONE
                                           -> TOOLS_REQUESTED -> DISPATCH
                                              -> MODEL_CALL_2 -> DONE
    INIT -> FALLBACK_SINGLE_CALL -> DONE          (no usable tool specs)
    any model-call failure, dispatch failure or turn timeout -> FAILED

The first model call may request tools ("auto"); the second call synthesizes
the answer from the tool results with tool invocation disabled ("none"), so a
turn makes at most two model calls. FAILED is terminal: nothing is retried
here, and a failed turn returns no partial answer.

Pattern: Service Layer (orchestrates registry, executor and provider)
Pattern: Dependency Injection (all collaborators passed to __init__)
Pattern: Explicit state machine with recorded transitions
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from assistant_gateway.core.config import Settings, get_settings
from assistant_gateway.core.exceptions import (
    AssistantGatewayException,
    ErrorCode,
    ModelCallError,
    TurnTimeoutError,
)
from assistant_gateway.models.domain import ToolCall
from assistant_gateway.models.requests import ChatCompletionRequest, Message
from assistant_gateway.models.responses import (
    ChatCompletionResponse,
    OrchestrationOutcome,
    TurnData,
)
from assistant_gateway.providers.base import LLMProvider
from assistant_gateway.tools.executor import ToolExecutor
from assistant_gateway.tools.registry import ToolRegistry
from assistant_gateway.tools.schema import PreparedTools, prepare_tools

logger = logging.getLogger(__name__)


FALLBACK_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Provide clear, accurate, and helpful responses."
)

TOOLS_SYSTEM_PROMPT = """You are a helpful AI assistant with access to various tools and APIs.

IMPORTANT INSTRUCTIONS:
1. When a user asks you to perform an action (create event, send email, etc.), USE THE AVAILABLE TOOLS immediately
2. DO NOT ask for information that you can reasonably infer or use defaults for
3. If userId is available in the context, use it automatically for tools that need it
4. For missing optional parameters, use sensible defaults
5. Only ask for clarification if absolutely critical information is missing
6. Be proactive and action-oriented - prefer doing over asking"""

FAILURE_MESSAGE = "An error occurred while processing the message"


# =============================================================================
# Turn State
# =============================================================================


class TurnState(str, Enum):
    """States of one orchestration run."""

    INIT = "INIT"
    TOOLS_PREPARED = "TOOLS_PREPARED"
    FALLBACK_SINGLE_CALL = "FALLBACK_SINGLE_CALL"
    MODEL_CALL_1 = "MODEL_CALL_1"
    NO_TOOLS_REQUESTED = "NO_TOOLS_REQUESTED"
    TOOLS_REQUESTED = "TOOLS_REQUESTED"
    DISPATCH = "DISPATCH"
    MODEL_CALL_2 = "MODEL_CALL_2"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class TurnContext:
    """
    Mutable state owned by a single run.

    Attributes:
        message: The user's message.
        user_id: Caller identity, if any.
        model: Model used for every call of the turn.
        state: Current state.
        history: Every state entered, in order, starting with INIT.
        messages: The conversation built so far.
        function_call_count: Tool calls dispatched.
        error: The error that moved the run to FAILED.
    """

    message: str
    user_id: Optional[str]
    model: str
    state: TurnState = TurnState.INIT
    history: list[TurnState] = field(default_factory=lambda: [TurnState.INIT])
    messages: list[Message] = field(default_factory=list)
    function_call_count: int = 0
    error: Optional[BaseException] = None

    def advance(self, state: TurnState) -> None:
        self.state = state
        self.history.append(state)

    def fail(self, error: BaseException) -> None:
        self.error = error
        self.advance(TurnState.FAILED)


# =============================================================================
# ConversationOrchestrator
# =============================================================================


class ConversationOrchestrator:
    """
    Drives one conversation turn per run() call.

    The orchestrator holds no per-turn state; concurrent runs share only the
    registry, which is read-only after startup.

    Attributes:
        provider: Model provider used for every call.
        registry: Source of the turn's tools.
        executor: Runs the model's tool calls.
        settings: Timeouts, default model and fallback sampling parameters.

    Example:
        >>> orchestrator = ConversationOrchestrator(provider, registry, executor)
        >>> outcome = await orchestrator.run("What's the weather in Paris?", user_id="u1")
        >>> outcome.data.function_call_count
        1
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: ToolRegistry,
        executor: ToolExecutor,
        settings: Optional[Settings] = None,
    ) -> None:
        self.provider = provider
        self.registry = registry
        self.executor = executor
        self.settings = settings or get_settings()

    # =========================================================================
    # run()
    # =========================================================================

    async def run(
        self,
        message: str,
        user_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> OrchestrationOutcome:
        """
        Run one turn and report the outcome.

        Never raises for turn failures: model-call errors, unexpected dispatch
        errors and the turn deadline all produce a failed outcome.

        Args:
            message: The user's message.
            user_id: Caller identity, injected into identity-scoped tools.
            model: Model identifier (default: settings.default_model).

        Returns:
            OrchestrationOutcome with the turn data or the error.
        """
        context = TurnContext(
            message=message,
            user_id=user_id,
            model=model or self.settings.default_model,
        )
        return await self.run_context(context)

    async def run_context(self, context: TurnContext) -> OrchestrationOutcome:
        """
        Run a turn on a caller-built context.

        The context's history afterwards records the path the turn took.
        """
        timeout = self.settings.turn_timeout_seconds

        try:
            data = await asyncio.wait_for(self._run_turn(context), timeout=timeout)
        except asyncio.TimeoutError:
            error = TurnTimeoutError(timeout)
            context.fail(error)
            logger.error(f"Turn timed out in state {context.history[-2].value}")
            return OrchestrationOutcome.failed(
                FAILURE_MESSAGE, details=error.message, code=error.error_code
            )
        except ModelCallError as e:
            context.fail(e)
            logger.error(f"Model call failed ({e.provider}): {e.message}")
            return OrchestrationOutcome.failed(
                FAILURE_MESSAGE, details=e.message, code=e.error_code
            )
        except AssistantGatewayException as e:
            context.fail(e)
            logger.error(f"Error processing message: {e.message}")
            return OrchestrationOutcome.failed(
                FAILURE_MESSAGE, details=e.message, code=e.error_code
            )
        except Exception as e:
            context.fail(e)
            logger.exception("Error processing message")
            return OrchestrationOutcome.failed(
                FAILURE_MESSAGE, details=str(e), code=ErrorCode.GATEWAY_ERROR
            )

        context.advance(TurnState.DONE)
        logger.info(
            f"Turn completed: {context.function_call_count} function call(s), "
            f"path {' -> '.join(s.value for s in context.history)}"
        )
        return OrchestrationOutcome.ok(data)

    async def _run_turn(self, context: TurnContext) -> TurnData:
        prepared = prepare_tools(self.registry.list())
        logger.info(f"Valid tools count: {len(prepared.specs)}")

        if prepared.is_empty:
            return await self._run_fallback(context)

        context.advance(TurnState.TOOLS_PREPARED)
        return await self._run_with_tools(context, prepared)

    # =========================================================================
    # Fallback path
    # =========================================================================

    async def _run_fallback(self, context: TurnContext) -> TurnData:
        """Single completion without tools: system prompt plus user message."""
        context.advance(TurnState.FALLBACK_SINGLE_CALL)
        logger.info("No valid tools available, using basic LLM response")

        request = ChatCompletionRequest(
            model=context.model,
            messages=[
                Message(role="system", content=FALLBACK_SYSTEM_PROMPT),
                Message(role="user", content=context.message),
            ],
            max_tokens=self.settings.fallback_max_tokens,
            temperature=self.settings.fallback_temperature,
        )
        response = await self._call_model(request)

        return TurnData(
            response=response.message.content or "",
            model=context.model,
            usage=response.usage,
            function_call_count=0,
            timestamp=_utc_timestamp(),
        )

    # =========================================================================
    # Tool path
    # =========================================================================

    async def _run_with_tools(
        self, context: TurnContext, prepared: PreparedTools
    ) -> TurnData:
        context.messages = [
            Message(role="system", content=self.build_system_prompt(prepared, context.user_id)),
            Message(role="user", content=context.message),
        ]
        request_tools = prepared.as_request_tools()

        context.advance(TurnState.MODEL_CALL_1)
        first = await self._call_model(
            ChatCompletionRequest(
                model=context.model,
                messages=list(context.messages),
                tools=request_tools,
                tool_choice="auto",
            )
        )
        assistant_message = first.message.to_message()
        context.messages.append(assistant_message)

        raw_calls = assistant_message.tool_calls or []
        if not raw_calls:
            context.advance(TurnState.NO_TOOLS_REQUESTED)
            return self._turn_data(context, first)

        context.advance(TurnState.TOOLS_REQUESTED)
        tool_calls = [ToolCall.from_openai_format(raw) for raw in raw_calls]
        logger.info(f"Function calls detected: {len(tool_calls)}")

        context.advance(TurnState.DISPATCH)
        results = await self.executor.dispatch(tool_calls, user_id=context.user_id)
        context.function_call_count = len(tool_calls)
        context.messages.extend(Message(**result.to_message_dict()) for result in results)

        context.advance(TurnState.MODEL_CALL_2)
        final = await self._call_model(
            ChatCompletionRequest(
                model=context.model,
                messages=list(context.messages),
                tools=request_tools,
                tool_choice="none",
            )
        )
        context.messages.append(final.message.to_message())
        return self._turn_data(context, final)

    @staticmethod
    def build_system_prompt(prepared: PreparedTools, user_id: Optional[str]) -> str:
        """
        System message for the tool path.

        Lists the available tool names, each tool's usage instructions, and
        the caller identity (or its absence).
        """
        sections = [TOOLS_SYSTEM_PROMPT]

        guidance = [
            f"{tool.name}: {tool.instructions}" for tool in prepared.tools if tool.instructions
        ]
        if guidance:
            sections.append("TOOL GUIDANCE:\n" + "\n\n".join(guidance))

        sections.append(f"Available tools: {', '.join(prepared.names)}")
        sections.append(f"User ID for this session: {user_id or 'not provided'}")
        return "\n\n".join(sections)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _call_model(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        Call the provider; every failure surfaces as ModelCallError.

        Raises:
            ModelCallError: If the provider call fails.
        """
        try:
            return await self.provider.complete(request)
        except ModelCallError:
            raise
        except Exception as e:
            raise ModelCallError(str(e), provider=self.provider.name) from e

    @staticmethod
    def _turn_data(context: TurnContext, response: ChatCompletionResponse) -> TurnData:
        return TurnData(
            response=response.message.content or "",
            model=context.model,
            usage=response.usage,
            function_call_count=context.function_call_count,
            conversation=list(context.messages),
            timestamp=_utc_timestamp(),
        )


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
