"""TurnRouter — decides where each inbound turn goes.

Order of checks:

1. Explicit presentation fields on the request (UI shortcuts) always
   route to the presentation handler; they are mapped to intents and run
   through the state machine without classifying text.
2. While the presentation is active, the latest human message is
   classified and the turn stays with the presentation handler, exit
   included.
3. While inactive, the general canvas flags are checked in a fixed order,
   then the start command, then the path resolver.  No route at all is a
   :class:`RoutingError`.

The router computes the next presentation state but never stores it;
the controller applies it.
"""

from __future__ import annotations

import logging

from agents.classifier import classify_intent, is_start_command, normalize_utterance
from agents.path_resolver import PathResolver, resolve_path
from errors.exceptions import RoutingError
from models.messages import ConversationMessage, HumanMessage
from models.presentation import PresentationState
from models.request import ContextDocument, RoutingDecision, TurnRequest
from models.routing import NO_ACTION, Action, ActionType, Intent, IntentType, RouteName
from services.content_store import ContentStore
from services.presentation_machine import transition

logger = logging.getLogger(__name__)

CONTEXT_DOCUMENTS_HEADER = "The following documents were provided as context for this conversation:"


# ---------------------------------------------------------------------------
# Context documents
# ---------------------------------------------------------------------------


def build_context_message(documents: list[ContextDocument]) -> HumanMessage | None:
    """Fold attached documents into one human message, or None when there are none."""
    if not documents:
        return None
    sections = [CONTEXT_DOCUMENTS_HEADER]
    for document in documents:
        sections.append(f"### {document.name} ({document.type})\n\n{document.data.strip()}")
    return HumanMessage(
        content="\n\n".join(sections),
        metadata={"contextDocuments": [d.name for d in documents]},
    )


# ---------------------------------------------------------------------------
# General canvas flags
# ---------------------------------------------------------------------------


def general_flag_route(request: TurnRequest) -> RouteName | None:
    """First general route a request flag selects, in fixed priority order."""
    if request.highlighted_code:
        return RouteName.UPDATE_ARTIFACT
    if request.highlighted_text:
        return RouteName.UPDATE_HIGHLIGHTED_TEXT
    if (
        request.language
        or request.artifact_length
        or request.regenerate_with_emojis
        or request.reading_level
    ):
        return RouteName.REWRITE_ARTIFACT_THEME
    if (
        request.add_comments
        or request.add_logs
        or request.port_language
        or request.fix_bugs
    ):
        return RouteName.REWRITE_CODE_ARTIFACT_THEME
    if request.custom_quick_action_id:
        return RouteName.CUSTOM_ACTION
    if request.web_search_enabled:
        return RouteName.WEB_SEARCH
    return None


# ---------------------------------------------------------------------------
# Explicit presentation fields
# ---------------------------------------------------------------------------


def intents_from_flags(
    request: TurnRequest,
    state: PresentationState,
    store: ContentStore,
) -> list[Intent]:
    """Map explicit presentation fields to the intents they stand for.

    Fields other than an exit imply the presentation is on, so an inactive
    presentation is started first.  Slide targets are clamped here.
    """
    latest = request.latest_human_message()
    utterance = latest.content if latest else ""

    if request.presentation_mode is False:
        return [Intent(type=IntentType.EXIT, utterance=utterance)]

    intents: list[Intent] = []
    if not state.is_active:
        intents.append(Intent(type=IntentType.START, target_slide=1, utterance=utterance))

    if request.quiz_answer is not None:
        intents.append(Intent(
            type=IntentType.QUIZ_ANSWER,
            question_id=request.quiz_answer.question_id,
            choice_id=request.quiz_answer.choice_id,
            utterance=utterance,
        ))
        return intents

    if request.presentation_slide is not None:
        target = store.clamp(request.presentation_slide)
        if state.is_active or target != 1:
            intents.append(Intent(
                type=IntentType.NAVIGATE_TO, target_slide=target, utterance=utterance
            ))

    if request.show_presentation_question:
        intents.append(Intent(type=IntentType.QUIZ_REQUEST, utterance=utterance))
    elif request.is_content_question:
        intents.append(Intent(type=IntentType.CONTENT_QUESTION, utterance=utterance))

    if not intents:
        # Presentation mode re-asserted while already active: redisplay.
        intents.append(Intent(type=IntentType.FALLBACK, utterance=utterance))
    return intents


def run_intents(
    state: PresentationState,
    intents: list[Intent],
    store: ContentStore,
) -> tuple[PresentationState, Action]:
    """Fold *intents* through the state machine; the last action wins."""
    action = NO_ACTION
    for intent in intents:
        state, action = transition(state, intent, store)
    return state, action


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


async def route_turn(
    request: TurnRequest,
    state: PresentationState,
    store: ContentStore,
    *,
    resolver: PathResolver = resolve_path,
) -> RoutingDecision:
    """Route one turn.

    Args:
        request: The inbound turn, flags included.
        state: Presentation state before the turn.
        store: Slide and quiz content.
        resolver: Chooses a general route when nothing else applies.

    Returns:
        A :class:`RoutingDecision`; presentation turns carry the next
        state and the action for the composer.

    Raises:
        RoutingError: no flag, presentation rule or resolver produced a route.
    """
    messages: list[ConversationMessage] = list(request.messages)
    context_message = build_context_message(request.context_documents)
    if context_message is not None:
        # Ahead of the latest human message, which stays last in the log.
        if messages and isinstance(messages[-1], HumanMessage):
            messages.insert(len(messages) - 1, context_message)
        else:
            messages.append(context_message)

    latest = request.latest_human_message()
    text = latest.content if latest else ""

    if request.has_presentation_flags:
        intents = intents_from_flags(request, state, store)
        new_state, action = run_intents(state, intents, store)
        logger.info(
            "Router: explicit flags -> %s",
            ",".join(intent.type.value for intent in intents),
        )
        return _presentation_decision(new_state, action, intents[-1], messages, store)

    if state.is_active:
        pending = store.question(state.pending_question_id) if state.pending_question_id else None
        intent = classify_intent(
            text,
            state,
            total_slides=store.total_slides,
            pending_question=pending,
            topic=store.topic,
        )
        new_state, action = transition(state, intent, store)
        return _presentation_decision(new_state, action, intent, messages, store)

    route = general_flag_route(request)
    if route is not None:
        logger.info("Router: general flag -> %s", route.value)
        return RoutingDecision(next=route, messages=messages, state=state)

    if is_start_command(normalize_utterance(text), store.topic):
        intent = Intent(type=IntentType.START, target_slide=1, utterance=text)
        new_state, action = transition(state, intent, store)
        return _presentation_decision(new_state, action, intent, messages, store)

    route = await resolver(text, messages, request.has_artifact)
    if route is None:
        logger.error("Router: no route for conversation=%s", request.conversation_id)
        raise RoutingError(conversation_id=request.conversation_id or "")

    logger.info("Router: resolver -> %s", route.value)
    return RoutingDecision(next=route, messages=messages, state=state)


def _presentation_decision(
    state: PresentationState,
    action: Action,
    intent: Intent,
    messages: list[ConversationMessage],
    store: ContentStore,
) -> RoutingDecision:
    slide = store.clamp(state.current_slide)
    context = store.slide_context(slide)
    return RoutingDecision(
        next=RouteName.PRESENTATION,
        presentation_mode=state.is_active,
        presentation_slide=slide if state.is_active else None,
        show_presentation_question=(
            action.type == ActionType.ASK_QUESTION and action.question_id is not None
        ),
        is_content_question=state.last_content_question_flag,
        slide_content=store.slide_body(slide) if state.is_active else None,
        slide_context=context.details if context and state.is_active else None,
        messages=messages,
        intent=intent,
        action=action,
        state=state,
    )
