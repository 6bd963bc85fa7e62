"""
Token Provider Port

Identity-scoped tools authenticate outward with a per-user access credential.
Resolving that credential (lookup, expiry check, refresh) belongs to an
external identity service; this module only defines the port the tools call
and an in-memory adapter for development and tests.

Pattern: Ports and Adapters - TokenProvider is the port
"""

import logging
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Provider key the Google tools resolve credentials under
GOOGLE_PROVIDER_KEY = "google_calendar"


@runtime_checkable
class TokenProvider(Protocol):
    """
    Resolves a currently valid access token for a user.

    Implementations refresh expired credentials transparently and return
    None when the user has no usable credential for the provider.
    """

    async def get_access_token(self, user_id: str, provider: str) -> Optional[str]:
        ...


class StaticTokenProvider:
    """
    In-memory TokenProvider.

    Tokens are held as given; there is no expiry or refresh.

    Example:
        >>> tokens = StaticTokenProvider({("u1", "google_calendar"): "ya29..."})
        >>> await tokens.get_access_token("u1", "google_calendar")
        'ya29...'
    """

    def __init__(self, tokens: Optional[dict[tuple[str, str], str]] = None) -> None:
        self._tokens: dict[tuple[str, str], str] = dict(tokens or {})

    def set_token(self, user_id: str, provider: str, access_token: str) -> None:
        """Store or replace a user's token for a provider."""
        self._tokens[(user_id, provider)] = access_token

    async def get_access_token(self, user_id: str, provider: str) -> Optional[str]:
        token = self._tokens.get((user_id, provider))
        if token is None:
            logger.info(f"No tokens found for provider {provider}")
        return token
