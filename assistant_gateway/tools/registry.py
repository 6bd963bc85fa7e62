"""
Tool Registry

This module implements the registry of callable tools. The registry validates
the structure of each tool once, at registration time, and afterwards only
serves reads.

Pattern: Service Registry (tool inventory keyed by name)
Pattern: Init-once lifecycle - built during startup discovery, then read-only

The registry accepts either a RegisteredTool or any capability object (or
mapping) that exposes ``name``, ``description``, ``schema`` and ``execute``,
plus the optional ``instructions`` and ``requires_identity``. Where tools come
from is not the registry's concern; see tools.discovery.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from assistant_gateway.core.exceptions import RegistrationError, ToolNotFoundError
from assistant_gateway.models.domain import RegisteredTool, ToolDefinition

logger = logging.getLogger(__name__)


def _read(candidate: Any, *keys: str) -> Any:
    """Return the first present attribute (or mapping key) among ``keys``."""
    for key in keys:
        if isinstance(candidate, Mapping):
            value = candidate.get(key)
        else:
            value = getattr(candidate, key, None)
        if value is not None:
            return value
    return None


def validate_schema(name: str, schema: Any) -> None:
    """
    Check that a tool schema is a JSON-Schema object with root type "object".

    Raises:
        RegistrationError: If the schema is not an object-typed mapping.
    """
    if not isinstance(schema, Mapping) or schema.get("type") != "object":
        raise RegistrationError(
            f"Tool {name} has invalid schema structure: root type must be 'object'",
            tool_name=name,
        )


class ToolRegistry:
    """
    Registry for managing available tools.

    Attributes:
        _tools: Insertion-ordered mapping of tool names to RegisteredTool.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(weather_tool)
        >>> tool = registry.get("getWeather")
        >>> result = await tool.handler({"location": "Paris"})
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, RegisteredTool] = {}

    # =========================================================================
    # register()
    # =========================================================================

    def register(self, tool: Any) -> RegisteredTool:
        """
        Validate and register a tool.

        A tool with the same name is overwritten (no merge). A failed
        registration leaves the registry unchanged.

        Args:
            tool: A RegisteredTool or a capability object/mapping.

        Returns:
            The stored RegisteredTool.

        Raises:
            RegistrationError: If a required field is missing or empty, the
                execute capability is not callable, or the schema root type
                is not "object".
        """
        registered = self._coerce(tool)
        validate_schema(registered.name, registered.parameters)

        if registered.name in self._tools:
            logger.info(f"Overwriting registered tool: {registered.name}")
        self._tools[registered.name] = registered
        logger.info(f"Tool registered: {registered.name}")
        return registered

    def _coerce(self, tool: Any) -> RegisteredTool:
        """Turn a capability into a RegisteredTool, checking required fields."""
        if isinstance(tool, RegisteredTool):
            name = tool.name
            description = tool.description
            schema = tool.parameters
            handler = tool.handler
        else:
            name = _read(tool, "name")
            description = _read(tool, "description")
            schema = _read(tool, "schema", "parameters")
            handler = _read(tool, "execute", "handler")

        if not name or not isinstance(name, str):
            raise RegistrationError("Tool must have a name")
        if not description:
            raise RegistrationError("Tool must have a description", tool_name=name)
        if not schema:
            raise RegistrationError("Tool must have a schema", tool_name=name)
        if handler is None:
            raise RegistrationError(
                "Tool must have an execute function", tool_name=name
            )
        if not callable(handler):
            raise RegistrationError(
                f"Tool {name} execute capability is not callable", tool_name=name
            )

        if isinstance(tool, RegisteredTool):
            return tool

        try:
            definition = ToolDefinition(
                name=name,
                description=description,
                instructions=_read(tool, "instructions"),
                parameters=schema,
                requires_identity=bool(
                    _read(tool, "requires_identity", "requiresIdentity")
                ),
            )
            return RegisteredTool(definition=definition, handler=handler)
        except ValidationError as e:
            raise RegistrationError(
                f"Tool {name} has an invalid definition: {e}", tool_name=name
            ) from e

    # =========================================================================
    # Read access
    # =========================================================================

    def get(self, name: str) -> RegisteredTool:
        """
        Get a registered tool by name.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        if name not in self._tools:
            raise ToolNotFoundError(name)
        return self._tools[name]

    def find(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by name, or None."""
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def names(self) -> list[str]:
        """Registered tool names in registration order."""
        return list(self._tools)

    # Defined last among the annotated methods: the name shadows the builtin
    # inside the class body.
    def list(self) -> list[RegisteredTool]:
        """
        List all registered tools in registration order.

        The order is stable so that schema generation is deterministic.
        """
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
