"""
Tools Package - Tool Registry, Discovery, Schema Adapter and Execution

This package provides the registry of available tools, the discovery pass
that fills it at startup, the adapter projecting tools into function specs,
and the executor running the model's tool calls.
"""

from assistant_gateway.tools.discovery import DiscoveryReport, discover_tools
from assistant_gateway.tools.executor import ToolExecutor
from assistant_gateway.tools.registry import ToolRegistry
from assistant_gateway.tools.schema import PreparedTools, prepare_tools

__all__ = [
    "ToolRegistry",
    "DiscoveryReport",
    "discover_tools",
    "PreparedTools",
    "prepare_tools",
    "ToolExecutor",
]
