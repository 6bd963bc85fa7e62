"""
Schema Adapter

Projects registered tools into the function-calling format the model API
expects. Every tool is re-validated on each turn; a tool that fails is logged,
reported and left out of that turn's tool list without affecting the others.

Pattern: Adapter (internal tool definitions -> provider function specs)
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from assistant_gateway.core.exceptions import SchemaValidationError
from assistant_gateway.models.domain import FunctionSpec, RegisteredTool
from assistant_gateway.models.requests import Tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedTools:
    """
    Function specs for one turn and the tools behind them.

    ``specs[i]`` is always the projection of ``tools[i]``.

    Attributes:
        specs: Provider-facing function specs.
        tools: The registered tools, index-aligned with ``specs``.
        rejected: Tools excluded for this turn, with the reason.
    """

    specs: list[FunctionSpec] = field(default_factory=list)
    tools: list[RegisteredTool] = field(default_factory=list)
    rejected: list[SchemaValidationError] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.specs

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.specs]

    def as_request_tools(self) -> list[Tool]:
        """Specs wrapped for a ChatCompletionRequest."""
        return [spec.to_tool() for spec in self.specs]


def to_function_spec(tool: RegisteredTool) -> FunctionSpec:
    """
    Re-validate a tool and project it to a FunctionSpec.

    Raises:
        SchemaValidationError: If the schema is not object-typed or the name,
            description or parameters are missing.
    """
    parameters = tool.parameters
    if not isinstance(parameters, Mapping) or parameters.get("type") != "object":
        raise SchemaValidationError(
            f"Tool {tool.name} has invalid schema, skipping", tool_name=tool.name
        )
    if not tool.name or not tool.description or not parameters:
        raise SchemaValidationError(
            f"Tool {tool.name} is missing required fields, skipping",
            tool_name=tool.name,
        )
    return FunctionSpec(
        name=tool.name,
        description=tool.description,
        parameters=dict(parameters),
    )


def prepare_tools(tools: Iterable[RegisteredTool]) -> PreparedTools:
    """
    Build the function specs for a turn.

    Args:
        tools: The registry's current tool list.

    Returns:
        PreparedTools with index-aligned specs and tools, plus rejections.
    """
    specs: list[FunctionSpec] = []
    kept: list[RegisteredTool] = []
    rejected: list[SchemaValidationError] = []

    for tool in tools:
        try:
            spec = to_function_spec(tool)
        except SchemaValidationError as e:
            logger.error(e.message)
            rejected.append(e)
            continue
        specs.append(spec)
        kept.append(tool)

    logger.debug(f"Prepared {len(specs)} function specs ({len(rejected)} rejected)")
    return PreparedTools(specs=specs, tools=kept, rejected=rejected)
