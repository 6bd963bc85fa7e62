"""
Tests for the schema adapter (prepare_tools / to_function_spec).
"""

from typing import Any

import pytest

from assistant_gateway.core.exceptions import SchemaValidationError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition
from assistant_gateway.tools.schema import prepare_tools, to_function_spec


async def _noop(args: dict[str, Any]) -> dict[str, Any]:
    return {}


def _tool(name: str, schema: dict[str, Any], description: str = "A tool") -> RegisteredTool:
    # model_construct skips validation so broken tools can reach the adapter
    definition = ToolDefinition.model_construct(
        name=name,
        description=description,
        instructions=None,
        parameters=schema,
        requires_identity=False,
    )
    return RegisteredTool.model_construct(definition=definition, handler=_noop)


VALID_SCHEMA = {"type": "object", "properties": {"q": {"type": "string"}}}


class TestToFunctionSpec:
    def test_projects_name_description_parameters(self, echo_tool: RegisteredTool) -> None:
        spec = to_function_spec(echo_tool)

        assert spec.name == "echo"
        assert spec.description == "Echo the arguments back"
        assert spec.parameters == echo_tool.parameters

    def test_instructions_are_not_part_of_spec(self) -> None:
        tool = RegisteredTool(
            definition=ToolDefinition(
                name="t", description="d", instructions="secret guidance", schema=VALID_SCHEMA
            ),
            handler=_noop,
        )

        rendered = to_function_spec(tool).to_tool().model_dump(exclude_none=True)

        assert rendered == {
            "type": "function",
            "function": {"name": "t", "description": "d", "parameters": VALID_SCHEMA},
        }

    def test_non_object_schema_rejected(self) -> None:
        with pytest.raises(SchemaValidationError, match="has invalid schema, skipping"):
            to_function_spec(_tool("bad", {"type": "array"}))

    def test_missing_description_rejected(self) -> None:
        with pytest.raises(SchemaValidationError, match="missing required fields"):
            to_function_spec(_tool("nodesc", VALID_SCHEMA, description=""))


class TestPrepareTools:
    def test_specs_and_tools_are_index_aligned(self) -> None:
        tools = [_tool("a", VALID_SCHEMA), _tool("bad", {"type": "string"}), _tool("c", VALID_SCHEMA)]

        prepared = prepare_tools(tools)

        assert prepared.names == ["a", "c"]
        assert [t.name for t in prepared.tools] == ["a", "c"]
        for spec, tool in zip(prepared.specs, prepared.tools):
            assert spec.name == tool.name

    def test_rejections_are_reported_not_fatal(self) -> None:
        prepared = prepare_tools([_tool("bad", {"type": "string"}), _tool("ok", VALID_SCHEMA)])

        assert len(prepared.rejected) == 1
        assert prepared.rejected[0].tool_name == "bad"
        assert prepared.rejected[0].error_code == "SCHEMA_VALIDATION_ERROR"
        assert prepared.names == ["ok"]

    def test_output_never_exceeds_input(self) -> None:
        tools = [_tool(str(i), VALID_SCHEMA if i % 2 else {"type": "x"}) for i in range(6)]

        prepared = prepare_tools(tools)

        assert len(prepared.specs) <= len(tools)
        assert set(prepared.names) <= {t.name for t in tools}

    def test_empty_registry_gives_empty_specs(self) -> None:
        prepared = prepare_tools([])

        assert prepared.is_empty
        assert prepared.as_request_tools() == []

    def test_request_tools(self) -> None:
        prepared = prepare_tools([_tool("a", VALID_SCHEMA)])

        request_tools = prepared.as_request_tools()
        assert request_tools[0].type == "function"
        assert request_tools[0].function.name == "a"
