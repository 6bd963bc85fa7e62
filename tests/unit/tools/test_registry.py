"""
Tests for ToolRegistry.

Test Categories:
1. TestRegister - accepted shapes of tools
2. TestRegisterValidation - rejected tools leave the registry unchanged
3. TestReadAccess - get/find/has/list/names
"""

from typing import Any

import pytest

from assistant_gateway.core.exceptions import RegistrationError, ToolNotFoundError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition
from assistant_gateway.tools.registry import ToolRegistry, validate_schema


async def _noop(args: dict[str, Any]) -> dict[str, Any]:
    return {}


def _capability(**overrides: Any) -> dict[str, Any]:
    capability = {
        "name": "getWeather",
        "description": "Get current weather",
        "schema": {"type": "object", "properties": {"location": {"type": "string"}}},
        "execute": _noop,
    }
    capability.update(overrides)
    return capability


class TestRegister:
    """Tests for register() with valid tools."""

    def test_register_registered_tool(self, registry: ToolRegistry, echo_tool: RegisteredTool) -> None:
        registry.register(echo_tool)

        assert registry.get("echo") is echo_tool
        assert len(registry) == 1

    def test_register_mapping_capability(self, registry: ToolRegistry) -> None:
        registered = registry.register(_capability(instructions="Use for weather"))

        assert registered.name == "getWeather"
        assert registered.instructions == "Use for weather"
        assert registered.parameters["type"] == "object"
        assert registered.handler is _noop

    def test_register_object_capability(self, registry: ToolRegistry) -> None:
        class Horoscope:
            name = "get_horoscope"
            description = "Horoscope for a sign"
            schema = {"type": "object", "properties": {"sign": {"type": "string"}}}
            requiresIdentity = True

            async def execute(self, args: dict[str, Any]) -> dict[str, Any]:
                return {"sign": args["sign"]}

        registered = registry.register(Horoscope())

        assert registered.name == "get_horoscope"
        assert registered.requires_identity is True

    def test_register_then_get_returns_equal_definition(self, registry: ToolRegistry) -> None:
        definition = ToolDefinition(
            name="calc",
            description="Calculator",
            schema={"type": "object", "properties": {"a": {"type": "number"}}},
        )
        registry.register(RegisteredTool(definition=definition, handler=_noop))

        assert registry.get("calc").definition == definition

    def test_reregistering_overwrites_without_merge(self, registry: ToolRegistry) -> None:
        registry.register(_capability(instructions="first"))
        registry.register(_capability(description="Replacement"))

        tool = registry.get("getWeather")
        assert tool.description == "Replacement"
        assert tool.instructions is None
        assert len(registry) == 1

    def test_overwrite_keeps_insertion_position(self, registry: ToolRegistry) -> None:
        registry.register(_capability(name="a"))
        registry.register(_capability(name="b"))
        registry.register(_capability(name="a", description="again"))

        assert registry.names() == ["a", "b"]


class TestRegisterValidation:
    """Tests for register() rejections."""

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": ""}, "Tool must have a name"),
            ({"description": ""}, "Tool must have a description"),
            ({"schema": None}, "Tool must have a schema"),
            ({"execute": None}, "Tool must have an execute function"),
        ],
    )
    def test_missing_field_raises(
        self, registry: ToolRegistry, overrides: dict[str, Any], message: str
    ) -> None:
        with pytest.raises(RegistrationError, match=message):
            registry.register(_capability(**overrides))

        assert len(registry) == 0

    def test_non_callable_execute_raises(self, registry: ToolRegistry) -> None:
        with pytest.raises(RegistrationError, match="not callable"):
            registry.register(_capability(execute="run"))

    def test_non_object_schema_raises(self, registry: ToolRegistry) -> None:
        with pytest.raises(RegistrationError, match="root type must be 'object'"):
            registry.register(_capability(schema={"type": "array"}))

        assert "getWeather" not in registry

    def test_failed_registration_keeps_existing_tool(self, registry: ToolRegistry) -> None:
        registry.register(_capability())

        with pytest.raises(RegistrationError):
            registry.register(_capability(schema={"type": "string"}))

        assert registry.get("getWeather").parameters["type"] == "object"

    def test_registration_error_carries_code_and_name(self, registry: ToolRegistry) -> None:
        with pytest.raises(RegistrationError) as exc_info:
            registry.register(_capability(description=""))

        assert exc_info.value.error_code == "REGISTRATION_ERROR"
        assert exc_info.value.tool_name == "getWeather"

    def test_validate_schema_rejects_non_mapping(self) -> None:
        with pytest.raises(RegistrationError):
            validate_schema("bad", ["type", "object"])


class TestReadAccess:
    """Tests for read access methods."""

    def test_get_unknown_raises(self, registry: ToolRegistry) -> None:
        with pytest.raises(ToolNotFoundError, match="Tool not found: missing"):
            registry.get("missing")

    def test_find_unknown_returns_none(self, registry: ToolRegistry) -> None:
        assert registry.find("missing") is None

    def test_has_and_contains(self, registry: ToolRegistry, echo_tool: RegisteredTool) -> None:
        registry.register(echo_tool)

        assert registry.has("echo")
        assert "echo" in registry
        assert not registry.has("other")

    def test_list_is_in_registration_order(self, registry: ToolRegistry) -> None:
        for name in ("c", "a", "b"):
            registry.register(_capability(name=name))

        assert [tool.name for tool in registry.list()] == ["c", "a", "b"]

    def test_list_returns_a_copy(self, registry: ToolRegistry, echo_tool: RegisteredTool) -> None:
        registry.register(echo_tool)

        registry.list().clear()

        assert len(registry) == 1
