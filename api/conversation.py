"""Conversation API — single entry point for chat turns.

Every turn is routed first: presentation turns get a composed reply,
general chat turns get a chat reply, and canvas routes (artifact
updates, rewrites, custom actions, web search) come back with a routing
decision and no message for the canvas to act on.

Endpoints:
- ``POST /api/conversation``                        — run one turn
- ``GET  /api/conversation/{conversation_id}``      — session snapshot
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from errors.exceptions import RoutingError, TurnInProgressError
from models.errors import ErrorCode, format_error
from models.request import TurnRequest, TurnResponse
from services.conversation_store import get_conversation_store
from services.turn_service import run_turn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["conversation"])


@router.post("/conversation", response_model=TurnResponse)
async def conversation(req: TurnRequest):
    """Route one turn and return the decision plus any reply."""
    if not req.messages and not req.has_presentation_flags:
        raise HTTPException(
            status_code=400,
            detail=format_error(ErrorCode.INVALID_REQUEST, "messages must not be empty"),
        )
    try:
        return await run_turn(req)
    except TurnInProgressError as e:
        raise HTTPException(
            status_code=409,
            detail=format_error(ErrorCode.TURN_IN_PROGRESS, str(e)),
        ) from e
    except RoutingError as e:
        logger.error("Routing failed for conversation %s", e.conversation_id)
        raise HTTPException(
            status_code=500,
            detail=format_error(ErrorCode.ROUTE_NOT_FOUND, str(e)),
        ) from e
    except Exception as e:
        logger.exception("Conversation processing failed")
        raise HTTPException(
            status_code=502,
            detail=format_error(ErrorCode.LLM_PROVIDER_ERROR, f"Conversation processing failed: {e}"),
        ) from e


@router.get("/conversation/{conversation_id}")
async def get_conversation(conversation_id: str):
    """Return the stored message log and presentation state."""
    session = await get_conversation_store().get(conversation_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail=format_error(ErrorCode.CONVERSATION_NOT_FOUND, conversation_id),
        )
    return {
        "conversationId": session.conversation_id,
        "turnSeq": session.turn_seq,
        "messages": [m.model_dump(by_alias=True) for m in session.messages],
        "presentation": session.presentation.model_dump(by_alias=True),
    }
