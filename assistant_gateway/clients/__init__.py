"""
Clients Package - outbound HTTP and identity collaborators.
"""

from assistant_gateway.clients.http import create_http_client
from assistant_gateway.clients.tokens import (
    GOOGLE_PROVIDER_KEY,
    StaticTokenProvider,
    TokenProvider,
)

__all__ = [
    "create_http_client",
    "TokenProvider",
    "StaticTokenProvider",
    "GOOGLE_PROVIDER_KEY",
]
