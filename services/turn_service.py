"""Turn service — one conversation turn, end to end.

Load or create the session, hold the per-conversation guard, route, apply
the presentation state, author the reply and save.  Presentation replies
come from the presentation handler, general replies from the chat agent,
and every other route is handed off without a reply.

Slide changes, panel answers and exits from the UI are also turns: each
synthesizes a human message and runs through the same path with explicit
presentation fields.
"""

from __future__ import annotations

import logging

from agents.chat import generate_response as chat_response
from agents.path_resolver import PathResolver, resolve_path
from agents.presentation_handler import handle_presentation
from agents.turn_router import CONTEXT_DOCUMENTS_HEADER, route_turn
from errors.exceptions import ConversationNotFoundError, UnknownChoiceError, UnknownQuestionError
from models.events import EventType, PresentationEvent
from models.messages import AssistantMessage, HumanMessage, generate_message_id
from models.presentation import PresentationState, QuizQuestion
from models.request import QuizAnswerSelection, TurnRequest, TurnResponse
from models.routing import RouteName
from services.concurrency import get_turn_guard
from services.content_store import ContentStore, get_content_store
from services.conversation_store import (
    ConversationSession,
    generate_conversation_id,
    get_conversation_store,
)
from services.event_bus import EventBus
from services.presentation_controller import PresentationController
from services.ui_sync import UIStateSync

logger = logging.getLogger(__name__)

EXIT_MESSAGE_TEXT = "Exit presentation mode"

_MESSAGE_HISTORY_MAX_TURNS = 20


def answer_message_text(question_text: str, choice_id: str, correct: bool) -> str:
    verdict = "correct" if correct else "incorrect"
    return f'Selected answer for question: "{question_text}". Choice: {choice_id} ({verdict})'


async def load_session(conversation_id: str | None) -> ConversationSession:
    store = get_conversation_store()
    if conversation_id:
        session = await store.get(conversation_id)
        if session is not None:
            return session
    session = ConversationSession(conversation_id=conversation_id or generate_conversation_id())
    logger.info("New conversation session: %s", session.conversation_id)
    return session


# ── Turn execution ───────────────────────────────────────────


async def run_turn(
    request: TurnRequest,
    *,
    resolver: PathResolver | None = None,
) -> TurnResponse:
    """Run one inbound turn under the conversation's turn guard.

    Raises:
        TurnInProgressError: another turn for the conversation is running.
        RoutingError: nothing could route the turn.
    """
    session = await load_session(request.conversation_id)
    async with get_turn_guard().hold(session.conversation_id):
        response = await _execute_turn(session, request, resolver=resolver)
        await get_conversation_store().save(session)
    return response


async def _execute_turn(
    session: ConversationSession,
    request: TurnRequest,
    *,
    resolver: PathResolver | None = None,
    from_frame: bool = False,
) -> TurnResponse:
    content = get_content_store()
    ui = UIStateSync(session, content)
    request = request.model_copy(update={"conversation_id": session.conversation_id})

    turn_seq = session.next_turn_seq()
    reply_id = generate_message_id()
    ui.begin_turn(turn_seq, reply_id)

    try:
        decision = await route_turn(
            request, session.presentation, content, resolver=resolver or resolve_path
        )
        for message in decision.messages:
            session.upsert_message(message)

        reply: AssistantMessage | None = None
        if decision.next == RouteName.PRESENTATION and decision.state is not None:
            await PresentationController(content).apply(
                session, decision.state, from_frame=from_frame
            )
            reply = await handle_presentation(
                decision, content, turn_seq=turn_seq, message_id=reply_id
            )
        elif decision.next == RouteName.REPLY_TO_GENERAL_INPUT:
            reply = await _general_reply(session, request, content, turn_seq, reply_id)
        else:
            logger.info(
                "Turn %d conv=%s handed off to %s",
                turn_seq, session.conversation_id, decision.next.value,
            )
    except Exception:
        ui.abandon_turn(reply_id)
        raise

    if reply is None:
        ui.abandon_turn(reply_id)
    else:
        ui.accept_reply(reply)

    return TurnResponse(
        conversation_id=session.conversation_id,
        turn_seq=turn_seq,
        decision=decision,
        message=reply,
        state=session.presentation,
    )


async def _general_reply(
    session: ConversationSession,
    request: TurnRequest,
    content: ContentStore,
    turn_seq: int,
    reply_id: str,
) -> AssistantMessage:
    latest = request.latest_human_message()
    context = "\n\n".join(
        m.content for m in session.messages
        if isinstance(m, HumanMessage) and m.content.startswith(CONTEXT_DOCUMENTS_HEADER)
    )
    text = await chat_response(
        latest.content if latest else "",
        topic=content.topic,
        context=context,
        message_history=session.to_pydantic_messages(max_turns=_MESSAGE_HISTORY_MAX_TURNS),
    )
    return AssistantMessage(id=reply_id, content=text, turn_seq=turn_seq)


# ── UI-originated turns ──────────────────────────────────────


async def sync_slide_change(conversation_id: str, slide_number: int) -> TurnResponse | None:
    """Turn a slide change reported by the slide frame into one navigation turn.

    Returns None when the change is a duplicate, arrives while another slide
    change is in flight, or the presentation is not active.
    """
    session = await load_session(conversation_id)
    async with get_turn_guard().hold(session.conversation_id):
        ui = UIStateSync(session, get_content_store())
        message = ui.begin_slide_change(slide_number)
        if message is None:
            return None
        try:
            request = TurnRequest(
                messages=[message],
                conversation_id=session.conversation_id,
                presentation_mode=True,
                presentation_slide=slide_number,
            )
            response = await _execute_turn(session, request, from_frame=True)
        finally:
            ui.finish_slide_change(slide_number)
            await get_conversation_store().save(session)
    return response


async def submit_answer(
    conversation_id: str,
    question_id: str,
    choice_id: str,
) -> TurnResponse:
    """Record a panel answer by running it as a quiz-answer turn.

    Raises:
        UnknownQuestionError: *question_id* is not in the bank.
        UnknownChoiceError: *choice_id* is not one of its choices.
    """
    await require_session(conversation_id)
    content = get_content_store()
    question = content.question(question_id)
    if question is None:
        raise UnknownQuestionError(question_id)
    choice = question.choice(choice_id)
    if choice is None:
        raise UnknownChoiceError(question_id, choice_id)

    message = HumanMessage(
        content=answer_message_text(question.text, choice.id, choice.is_correct),
        metadata={"questionId": question.id, "choiceId": choice.id},
    )
    return await run_turn(TurnRequest(
        messages=[message],
        conversation_id=conversation_id,
        presentation_mode=True,
        quiz_answer=QuizAnswerSelection(question_id=question.id, choice_id=choice.id),
    ))


async def exit_presentation(conversation_id: str) -> TurnResponse:
    """Leave presentation mode from the UI's exit control."""
    await require_session(conversation_id)
    return await run_turn(TurnRequest(
        messages=[HumanMessage(content=EXIT_MESSAGE_TEXT)],
        conversation_id=conversation_id,
        presentation_mode=False,
    ))


# ── Panel operations ─────────────────────────────────────────


async def require_session(conversation_id: str) -> ConversationSession:
    session = await get_conversation_store().get(conversation_id)
    if session is None:
        raise ConversationNotFoundError(conversation_id)
    return session


async def set_multiple_choice_mode(
    conversation_id: str,
    enabled: bool | None = None,
) -> PresentationState:
    session = await require_session(conversation_id)
    async with get_turn_guard().hold(conversation_id):
        state = await PresentationController(get_content_store()).set_multiple_choice_mode(
            session, enabled
        )
        await get_conversation_store().save(session)
    return state


async def navigate_question(
    conversation_id: str,
    *,
    direction: str = "next",
    index: int | None = None,
    question_id: str | None = None,
) -> tuple[PresentationState, QuizQuestion]:
    session = await require_session(conversation_id)
    async with get_turn_guard().hold(conversation_id):
        state, question = await PresentationController(get_content_store()).navigate_question(
            session, direction=direction, index=index, question_id=question_id
        )
        await get_conversation_store().save(session)
    return state, question


async def reset_progress(conversation_id: str) -> PresentationState:
    session = await require_session(conversation_id)
    async with get_turn_guard().hold(conversation_id):
        state = await PresentationController(get_content_store()).reset_progress(session)
        await get_conversation_store().save(session)
    return state


# ── Event bus wiring ─────────────────────────────────────────


async def _on_slide_changed(event: PresentationEvent) -> None:
    slide_number = getattr(event, "slide_number", None)
    if slide_number is None:
        return
    await sync_slide_change(event.conversation_id, slide_number)


def register_event_handlers(bus: EventBus):
    """Subscribe the turn service to frame events; returns the unsubscribe callable."""
    return bus.subscribe(EventType.SLIDE_CHANGED, _on_slide_changed)
