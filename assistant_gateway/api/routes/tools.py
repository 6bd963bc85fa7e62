"""
Tools Router

GET /api/tools lists the registered tools for operators. Only metadata is
returned; parameter schemas are included so callers can see what the model
is offered.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from assistant_gateway.api.deps import get_registry
from assistant_gateway.tools.registry import ToolRegistry


class ToolSummary(BaseModel):
    """Public view of a registered tool."""

    name: str
    description: str
    instructions: Optional[str] = None
    parameters: dict[str, Any]
    requires_identity: bool


router = APIRouter(prefix="/api", tags=["Tools"])


@router.get("/tools", response_model=list[ToolSummary])
async def list_tools(registry: ToolRegistry = Depends(get_registry)) -> list[ToolSummary]:
    """List registered tools in registration order."""
    return [
        ToolSummary(
            name=tool.name,
            description=tool.description,
            instructions=tool.instructions,
            parameters=tool.parameters,
            requires_identity=tool.requires_identity,
        )
        for tool in registry.list()
    ]
