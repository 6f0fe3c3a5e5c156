"""Presentation handler — the ``presentationModeHandler`` route.

Takes a routing decision that already carries the next state and the
action, and produces the assistant message for it.
"""

from __future__ import annotations

import logging

from agents.composer import ResponseComposer, build_assistant_message
from models.messages import AssistantMessage
from models.presentation import PresentationState
from models.request import RoutingDecision
from models.routing import NO_ACTION
from services.content_store import ContentStore

logger = logging.getLogger(__name__)


async def handle_presentation(
    decision: RoutingDecision,
    store: ContentStore,
    *,
    turn_seq: int,
    message_id: str | None = None,
) -> AssistantMessage:
    state = decision.state or PresentationState()
    action = decision.action or NO_ACTION
    reply = await ResponseComposer(store).compose(action, state)
    logger.info(
        "PresentationHandler: action=%s slide=%d show_question=%s",
        action.type.value, reply.slide, reply.show_question,
    )
    return build_assistant_message(reply, store, turn_seq=turn_seq, message_id=message_id)
