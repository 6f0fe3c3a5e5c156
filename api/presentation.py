"""Presentation API — slide data, quiz panel and frame synchronization.

Endpoints:
- ``GET  /api/presentation/slides``                               — all slides with questions
- ``GET  /api/presentation/slides/{n}``                           — one slide
- ``POST /api/presentation/answer``                               — submit a panel answer
- ``GET  /api/presentation/progress/{conversation_id}``           — quiz progress
- ``POST /api/presentation/progress/{conversation_id}/reset``     — clear quiz progress
- ``POST /api/presentation/{conversation_id}/slide-changed``      — slide frame moved
- ``POST /api/presentation/{conversation_id}/exit``               — exit control
- ``POST /api/presentation/{conversation_id}/multiple-choice``    — panel mode on/off/toggle
- ``POST /api/presentation/{conversation_id}/question``           — panel question navigation

Choices are served without their correctness flag.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from errors.exceptions import (
    ConversationNotFoundError,
    TurnInProgressError,
    UnknownChoiceError,
    UnknownQuestionError,
)
from models.errors import ErrorCode, format_error
from models.presentation import PresentationState, QuizQuestion
from models.request import (
    AnswerRequest,
    ChoiceOut,
    MultipleChoiceModeRequest,
    ProgressResponse,
    QuestionNavigationRequest,
    QuestionNavigationResponse,
    QuestionOut,
    SlideChangedRequest,
    SlideOut,
    TurnResponse,
)
from services import quiz, turn_service
from services.content_store import ContentStore, get_content_store
from services.conversation_store import get_conversation_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/presentation", tags=["presentation"])


def _question_out(question: QuizQuestion, state: PresentationState | None = None) -> QuestionOut:
    return QuestionOut(
        id=question.id,
        slide_number=question.slide_number,
        text=question.text,
        choices=[ChoiceOut(id=c.id, text=c.text) for c in question.choices],
        answered=bool(state and state.is_answered(question.id)),
    )


def _slide_out(store: ContentStore, number: int, state: PresentationState | None = None) -> SlideOut:
    return SlideOut(
        number=number,
        title=store.slide_title(number),
        body=store.slide_body(number),
        questions=[_question_out(q, state) for q in store.questions_for_slide(number)],
    )


async def _state_for(conversation_id: str | None) -> PresentationState | None:
    if not conversation_id:
        return None
    session = await get_conversation_store().get(conversation_id)
    return session.presentation if session else None


def _http_error(exc: Exception) -> HTTPException:
    """Map a presentation-core exception to its HTTP error."""
    if isinstance(exc, TurnInProgressError):
        return HTTPException(status_code=409, detail=format_error(ErrorCode.TURN_IN_PROGRESS, str(exc)))
    if isinstance(exc, ConversationNotFoundError):
        return HTTPException(
            status_code=404, detail=format_error(ErrorCode.CONVERSATION_NOT_FOUND, str(exc))
        )
    if isinstance(exc, (UnknownQuestionError, UnknownChoiceError)):
        return HTTPException(status_code=404, detail=format_error(ErrorCode.QUESTION_NOT_FOUND, str(exc)))
    return HTTPException(status_code=500, detail=format_error(ErrorCode.INTERNAL_ERROR, str(exc)))


_HANDLED = (TurnInProgressError, ConversationNotFoundError, UnknownQuestionError, UnknownChoiceError)


# ── Slides ───────────────────────────────────────────────────


@router.get("/slides", response_model=list[SlideOut])
async def list_slides(conversation_id: str | None = None):
    """Every slide with its questions; ``conversation_id`` marks answered ones."""
    store = get_content_store()
    state = await _state_for(conversation_id)
    return [_slide_out(store, slide.number, state) for slide in store.slides()]


@router.get("/slides/{slide_number}", response_model=SlideOut)
async def get_slide(slide_number: int, conversation_id: str | None = None):
    store = get_content_store()
    if not store.has_slide(slide_number):
        raise HTTPException(
            status_code=404,
            detail=format_error(ErrorCode.SLIDE_NOT_FOUND, f"Slide {slide_number} not found"),
        )
    return _slide_out(store, slide_number, await _state_for(conversation_id))


# ── Quiz ─────────────────────────────────────────────────────


@router.post("/answer", response_model=TurnResponse)
async def submit_answer(req: AnswerRequest):
    """Record a panel answer; the reply evaluates it in the chat."""
    try:
        return await turn_service.submit_answer(req.conversation_id, req.question_id, req.choice_id)
    except _HANDLED as e:
        raise _http_error(e) from e


@router.get("/progress/{conversation_id}", response_model=ProgressResponse)
async def get_progress(conversation_id: str):
    state = await _state_for(conversation_id)
    if state is None:
        raise _http_error(ConversationNotFoundError(conversation_id))
    return ProgressResponse(
        conversation_id=conversation_id,
        progress=quiz.progress(state, get_content_store()),
    )


@router.post("/progress/{conversation_id}/reset", response_model=ProgressResponse)
async def reset_progress(conversation_id: str):
    try:
        state = await turn_service.reset_progress(conversation_id)
    except _HANDLED as e:
        raise _http_error(e) from e
    return ProgressResponse(
        conversation_id=conversation_id,
        progress=quiz.progress(state, get_content_store()),
    )


@router.post("/{conversation_id}/multiple-choice", response_model=PresentationState)
async def set_multiple_choice_mode(conversation_id: str, req: MultipleChoiceModeRequest):
    """Enable, disable, or (no ``enabled`` field) toggle the question panel."""
    try:
        return await turn_service.set_multiple_choice_mode(conversation_id, req.enabled)
    except _HANDLED as e:
        raise _http_error(e) from e


@router.post("/{conversation_id}/question", response_model=QuestionNavigationResponse)
async def navigate_question(conversation_id: str, req: QuestionNavigationRequest):
    """Move the panel to another question; the slide follows the question."""
    if req.direction not in ("next", "previous"):
        raise HTTPException(
            status_code=400,
            detail=format_error(ErrorCode.INVALID_REQUEST, f"Unknown direction {req.direction!r}"),
        )
    try:
        state, question = await turn_service.navigate_question(
            conversation_id,
            direction=req.direction,
            index=req.index,
            question_id=req.question_id,
        )
    except _HANDLED as e:
        raise _http_error(e) from e
    return QuestionNavigationResponse(
        question=_question_out(question, state),
        question_index=state.current_question_index,
        slide_number=question.slide_number,
        state=state,
    )


# ── Frame and controls ───────────────────────────────────────


@router.post("/{conversation_id}/slide-changed")
async def slide_changed(conversation_id: str, req: SlideChangedRequest):
    """The slide frame moved; runs one navigation turn unless it is a repeat."""
    store = get_content_store()
    if not store.has_slide(req.slide_number):
        raise HTTPException(
            status_code=404,
            detail=format_error(ErrorCode.SLIDE_NOT_FOUND, f"Slide {req.slide_number} not found"),
        )
    try:
        response = await turn_service.sync_slide_change(conversation_id, req.slide_number)
    except _HANDLED as e:
        raise _http_error(e) from e
    if response is None:
        logger.info("Slide change to %d skipped for %s", req.slide_number, conversation_id)
        return {"conversationId": conversation_id, "skipped": True}
    return response.model_dump(by_alias=True)


@router.post("/{conversation_id}/exit", response_model=TurnResponse)
async def exit_presentation(conversation_id: str):
    try:
        return await turn_service.exit_presentation(conversation_id)
    except _HANDLED as e:
        raise _http_error(e) from e
