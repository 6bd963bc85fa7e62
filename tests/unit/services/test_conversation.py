"""
Test Suite for ConversationOrchestrator

Test Categories:
1. TestFallbackPath - no usable tools, single model call
2. TestToolPath - two-phase protocol with and without tool calls
3. TestFailures - model errors, turn timeout, unexpected errors
4. TestSystemPrompt - tool guidance and caller identity
"""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

import pytest

from assistant_gateway.core.config import Settings
from assistant_gateway.core.exceptions import ModelCallError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition
from assistant_gateway.models.requests import ChatCompletionRequest
from assistant_gateway.models.responses import (
    ChatCompletionResponse,
    Choice,
    ChoiceMessage,
    Usage,
)
from assistant_gateway.providers.fake import FakeProvider, tool_call, tool_calls_message
from assistant_gateway.services.conversation import (
    FAILURE_MESSAGE,
    FALLBACK_SYSTEM_PROMPT,
    ConversationOrchestrator,
    TurnContext,
    TurnState,
)
from assistant_gateway.tools.builtin.google_calendar import TOOL as CALENDAR_TOOL
from assistant_gateway.tools.executor import ToolExecutor
from assistant_gateway.tools.registry import ToolRegistry
from assistant_gateway.tools.schema import prepare_tools


# =============================================================================
# Helpers
# =============================================================================


def _orchestrator(
    provider: Any, registry: ToolRegistry, settings: Settings
) -> ConversationOrchestrator:
    executor = ToolExecutor(registry=registry, timeout=settings.tool_timeout_seconds)
    return ConversationOrchestrator(provider, registry, executor, settings=settings)


def _context(message: str = "Hello", user_id: str | None = "u1") -> TurnContext:
    return TurnContext(message=message, user_id=user_id, model="gpt-5-nano")


def _response(content: str, total_tokens: int) -> ChatCompletionResponse:
    return ChatCompletionResponse(
        id="chatcmpl-final",
        created=0,
        model="gpt-5-nano",
        choices=[Choice(index=0, message=ChoiceMessage(content=content), finish_reason="stop")],
        usage=Usage(prompt_tokens=total_tokens - 1, completion_tokens=1, total_tokens=total_tokens),
    )


class SlowProvider(FakeProvider):
    """Provider whose calls never finish within a short deadline."""

    async def complete(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        await asyncio.sleep(10)
        return await super().complete(request)


# =============================================================================
# TestFallbackPath
# =============================================================================


class TestFallbackPath:
    @pytest.mark.asyncio
    async def test_empty_registry_uses_single_call(
        self, registry: ToolRegistry, test_settings: Settings
    ) -> None:
        provider = FakeProvider(responses=["Hi! How can I help?"])
        orchestrator = _orchestrator(provider, registry, test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.success is True
        assert outcome.data.response == "Hi! How can I help?"
        assert outcome.data.function_call_count == 0
        assert outcome.data.conversation == []
        assert outcome.data.usage is not None
        assert context.history == [TurnState.INIT, TurnState.FALLBACK_SINGLE_CALL, TurnState.DONE]

    @pytest.mark.asyncio
    async def test_fallback_request_shape(
        self, registry: ToolRegistry, test_settings: Settings
    ) -> None:
        provider = FakeProvider()
        orchestrator = _orchestrator(provider, registry, test_settings)

        await orchestrator.run("Hello")

        assert len(provider.complete_calls) == 1
        request = provider.complete_calls[0]
        assert request.tools is None
        assert request.tool_choice is None
        assert request.max_tokens == test_settings.fallback_max_tokens
        assert request.temperature == test_settings.fallback_temperature
        assert [m.role for m in request.messages] == ["system", "user"]
        assert request.messages[0].content == FALLBACK_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_invalid_tools_only_falls_back(
        self, registry: ToolRegistry, test_settings: Settings
    ) -> None:
        # Registered, then hidden by the per-turn re-validation
        broken = RegisteredTool.model_construct(
            definition=ToolDefinition.model_construct(
                name="broken",
                description="",
                instructions=None,
                parameters={"type": "object"},
                requires_identity=False,
            ),
            handler=lambda args: args,
        )
        registry._tools["broken"] = broken
        orchestrator = _orchestrator(FakeProvider(), registry, test_settings)
        context = _context()

        await orchestrator.run_context(context)

        assert TurnState.FALLBACK_SINGLE_CALL in context.history
        assert TurnState.TOOLS_PREPARED not in context.history


# =============================================================================
# TestToolPath
# =============================================================================


class TestToolPath:
    @pytest.mark.asyncio
    async def test_no_tools_requested(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(responses=["No tool needed."])
        orchestrator = _orchestrator(provider, registry, test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.data.response == "No tool needed."
        assert [m.role for m in outcome.data.conversation] == ["system", "user", "assistant"]
        assert len(provider.complete_calls) == 1
        assert provider.complete_calls[0].tool_choice == "auto"
        assert provider.complete_calls[0].tools[0].function.name == "echo"
        assert context.history == [
            TurnState.INIT,
            TurnState.TOOLS_PREPARED,
            TurnState.MODEL_CALL_1,
            TurnState.NO_TOOLS_REQUESTED,
            TurnState.DONE,
        ]

    @pytest.mark.asyncio
    async def test_tool_call_then_final_answer(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(
            responses=[
                tool_calls_message(tool_call("call_1", "echo", {"text": "hi"})),
                _response("The echo said hi.", total_tokens=42),
            ]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        data = outcome.data
        assert data.response == "The echo said hi."
        assert data.function_call_count == 1
        assert data.usage.total_tokens == 42
        assert [m.role for m in data.conversation] == [
            "system",
            "user",
            "assistant",
            "tool",
            "assistant",
        ]
        tool_message = data.conversation[3]
        assert tool_message.tool_call_id == "call_1"
        assert json.loads(tool_message.content) == {"echo": {"text": "hi"}}
        assert context.history == [
            TurnState.INIT,
            TurnState.TOOLS_PREPARED,
            TurnState.MODEL_CALL_1,
            TurnState.TOOLS_REQUESTED,
            TurnState.DISPATCH,
            TurnState.MODEL_CALL_2,
            TurnState.DONE,
        ]

    @pytest.mark.asyncio
    async def test_second_call_disables_tools(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(
            responses=[tool_calls_message(tool_call("call_1", "echo", {"text": "hi"})), "done"]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)

        await orchestrator.run("Echo hi")

        first, second = provider.complete_calls
        assert first.tool_choice == "auto"
        assert second.tool_choice == "none"
        assert [m.role for m in second.messages] == ["system", "user", "assistant", "tool"]
        assert second.messages[2].tool_calls[0]["id"] == "call_1"

    @pytest.mark.asyncio
    async def test_unknown_tool_answered_with_error_payload(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(
            responses=[tool_calls_message(tool_call("call_9", "doesNotExist")), "Sorry."]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("Do something")

        assert outcome.success is True
        tool_message = outcome.data.conversation[3]
        assert tool_message.tool_call_id == "call_9"
        assert json.loads(tool_message.content) == {"error": "tool not found"}

    @pytest.mark.asyncio
    async def test_every_call_gets_a_tool_message(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(
            responses=[
                tool_calls_message(
                    tool_call("a", "echo", {"text": "1"}),
                    tool_call("b", "echo", "{broken"),
                    tool_call("c", "missing"),
                ),
                "All done.",
            ]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("Three things")

        tool_ids = [m.tool_call_id for m in outcome.data.conversation if m.role == "tool"]
        assert tool_ids == ["a", "b", "c"]
        assert outcome.data.function_call_count == 3

    @pytest.mark.asyncio
    async def test_user_id_injected_into_identity_tools(
        self, registry: ToolRegistry, identity_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(identity_tool)
        provider = FakeProvider(responses=[tool_calls_message(tool_call("w", "whoami")), "You are u1."])
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("Who am I?", user_id="u1")

        assert json.loads(outcome.data.conversation[3].content) == {"received": {"userId": "u1"}}

    @pytest.mark.asyncio
    async def test_calendar_without_user_fails_inside_conversation(
        self, registry: ToolRegistry, test_settings: Settings
    ) -> None:
        registry.register(CALENDAR_TOOL)
        provider = FakeProvider(
            responses=[
                tool_calls_message(tool_call("cal", "googleCalendar", {"operation": "list"})),
                "Please sign in to Google first.",
            ]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("What's on my calendar?", user_id=None)

        assert outcome.success is True
        payload = json.loads(outcome.data.conversation[3].content)
        assert "No valid OAuth tokens found" in payload["error"]

    @pytest.mark.asyncio
    async def test_default_model_applies(
        self, registry: ToolRegistry, test_settings: Settings
    ) -> None:
        provider = FakeProvider()
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("Hello", model=None)

        assert outcome.data.model == test_settings.default_model
        assert provider.complete_calls[0].model == test_settings.default_model

    @pytest.mark.asyncio
    async def test_timestamp_is_utc_iso(self, registry: ToolRegistry, test_settings: Settings) -> None:
        orchestrator = _orchestrator(FakeProvider(), registry, test_settings)

        outcome = await orchestrator.run("Hello")

        assert outcome.data.timestamp.endswith("Z")
        assert "T" in outcome.data.timestamp


# =============================================================================
# TestFailures
# =============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_first_model_call_failure(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(error_on_complete=RuntimeError("upstream unavailable"))
        orchestrator = _orchestrator(provider, registry, test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.success is False
        assert outcome.data is None
        assert outcome.error.message == FAILURE_MESSAGE
        assert outcome.error.details == "upstream unavailable"
        assert outcome.error.code == "MODEL_CALL_ERROR"
        assert context.history[-2:] == [TurnState.MODEL_CALL_1, TurnState.FAILED]
        assert len(provider.complete_calls) == 1

    @pytest.mark.asyncio
    async def test_second_model_call_failure_returns_no_partial_answer(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(
            responses=[
                tool_calls_message(tool_call("call_1", "echo", {"text": "hi"})),
                ModelCallError("rate limited", provider="fake", status_code=429),
            ]
        )
        orchestrator = _orchestrator(provider, registry, test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.success is False
        assert outcome.data is None
        assert outcome.error.details == "rate limited"
        assert context.history[-2:] == [TurnState.MODEL_CALL_2, TurnState.FAILED]

    @pytest.mark.asyncio
    async def test_fallback_failure(self, registry: ToolRegistry, test_settings: Settings) -> None:
        provider = FakeProvider(error_on_complete=ConnectionError("network down"))
        orchestrator = _orchestrator(provider, registry, test_settings)

        outcome = await orchestrator.run("Hello")

        assert outcome.success is False
        assert outcome.error.code == "MODEL_CALL_ERROR"

    @pytest.mark.asyncio
    async def test_turn_timeout(self, registry: ToolRegistry, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"turn_timeout_seconds": 0.05})
        orchestrator = _orchestrator(SlowProvider(), registry, settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.success is False
        assert outcome.error.code == "TIMEOUT"
        assert outcome.error.details == "Turn exceeded 0.05s deadline"
        assert context.history[-1] == TurnState.FAILED

    @pytest.mark.asyncio
    async def test_unexpected_dispatch_error(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider(responses=[tool_calls_message(tool_call("c", "echo"))])
        executor = ToolExecutor(registry=registry)
        executor.dispatch = AsyncMock(side_effect=RuntimeError("executor crashed"))
        orchestrator = ConversationOrchestrator(provider, registry, executor, settings=test_settings)
        context = _context()

        outcome = await orchestrator.run_context(context)

        assert outcome.success is False
        assert outcome.error.code == "GATEWAY_ERROR"
        assert outcome.error.details == "executor crashed"
        assert context.history[-2:] == [TurnState.DISPATCH, TurnState.FAILED]


# =============================================================================
# TestSystemPrompt
# =============================================================================


class TestSystemPrompt:
    def test_lists_tools_and_user(self, echo_tool: RegisteredTool) -> None:
        prompt = ConversationOrchestrator.build_system_prompt(prepare_tools([echo_tool]), "u1")

        assert "Available tools: echo" in prompt
        assert "User ID for this session: u1" in prompt
        assert "TOOL GUIDANCE" not in prompt

    def test_includes_tool_instructions(self) -> None:
        tool = RegisteredTool(
            definition=ToolDefinition(
                name="getWeather",
                description="Weather",
                instructions="Always ask for a city.",
                schema={"type": "object", "properties": {}},
            ),
            handler=lambda args: args,
        )

        prompt = ConversationOrchestrator.build_system_prompt(prepare_tools([tool]), None)

        assert "TOOL GUIDANCE:" in prompt
        assert "getWeather: Always ask for a city." in prompt
        assert "User ID for this session: not provided" in prompt

    @pytest.mark.asyncio
    async def test_system_message_sent_first(
        self, registry: ToolRegistry, echo_tool: RegisteredTool, test_settings: Settings
    ) -> None:
        registry.register(echo_tool)
        provider = FakeProvider()
        orchestrator = _orchestrator(provider, registry, test_settings)

        await orchestrator.run("Hi", user_id="u42")

        messages = provider.complete_calls[0].messages
        assert messages[0].role == "system"
        assert "User ID for this session: u42" in messages[0].content
        assert messages[1].content == "Hi"
