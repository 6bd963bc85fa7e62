"""
API Routes Package.
"""

from assistant_gateway.api.routes.health import router as health_router
from assistant_gateway.api.routes.messages import router as messages_router
from assistant_gateway.api.routes.tools import router as tools_router

__all__ = [
    "health_router",
    "messages_router",
    "tools_router",
]
