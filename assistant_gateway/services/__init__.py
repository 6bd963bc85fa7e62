"""
Services Package - turn orchestration.
"""

from assistant_gateway.services.conversation import (
    ConversationOrchestrator,
    TurnContext,
    TurnState,
)

__all__ = [
    "ConversationOrchestrator",
    "TurnContext",
    "TurnState",
]
