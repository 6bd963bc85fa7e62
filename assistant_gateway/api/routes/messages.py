"""
Messages Router

POST /api/message-llm runs one conversation turn for the caller.

Status mapping:
- 200: turn completed
- 400: request body failed validation (handled in main.py)
- 500: the turn failed (model call error, unexpected failure)
- 504: the turn exceeded its deadline
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from assistant_gateway.api.deps import get_orchestrator
from assistant_gateway.core.exceptions import ErrorCode
from assistant_gateway.models.requests import MessageRequest
from assistant_gateway.models.responses import ErrorInfo, TurnData
from assistant_gateway.services.conversation import ConversationOrchestrator

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "LLM response generated successfully"


class MessageResponse(BaseModel):
    """Success body of POST /api/message-llm."""

    success: bool = True
    message: str = SUCCESS_MESSAGE
    data: TurnData


class ErrorResponse(BaseModel):
    """Failure body shared by every error status."""

    success: bool = False
    error: ErrorInfo


router = APIRouter(prefix="/api", tags=["Messages"])


@router.post(
    "/message-llm",
    response_model=MessageResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def message_llm(
    body: MessageRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> Any:
    """
    Run one conversation turn.

    Args:
        body: Validated message request.
        orchestrator: Injected conversation orchestrator.

    Returns:
        MessageResponse on success, or a JSONResponse error body.
    """
    logger.debug(f"Message request: model={body.model or 'default'}, length={len(body.message)}")

    outcome = await orchestrator.run(body.message, user_id=body.user_id, model=body.model)

    if outcome.success and outcome.data is not None:
        return MessageResponse(data=outcome.data)

    error = outcome.error or ErrorInfo(message="An error occurred while processing the message")
    return JSONResponse(
        status_code=_status_for(error.code),
        content=ErrorResponse(error=error).model_dump(exclude_none=True),
    )


def _status_for(code: Optional[str]) -> int:
    if code == ErrorCode.TIMEOUT:
        return 504
    return 500
