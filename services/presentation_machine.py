"""PresentationStateMachine — pure ``(state, intent) -> (state', action)`` transitions.

States are ``Inactive`` and ``Active{slide, awaitingAnswer}``.  Nothing
here mutates its input: every transition returns a fresh
:class:`PresentationState`, and a single owner
(:mod:`services.presentation_controller`) applies it.

Slide numbers are clamped to ``[1, N]`` even though the classifier already
rejects out-of-range targets.
"""

from __future__ import annotations

import logging

from models.presentation import PresentationMode, PresentationState, QuizQuestion
from models.routing import NO_ACTION, Action, ActionType, Intent, IntentType
from services.content_store import ContentStore

logger = logging.getLogger(__name__)

_NAVIGATION = frozenset({
    IntentType.NAVIGATE_NEXT,
    IntentType.NAVIGATE_PREV,
    IntentType.NAVIGATE_TO,
})


def transition(
    state: PresentationState,
    intent: Intent,
    store: ContentStore,
) -> tuple[PresentationState, Action]:
    """Apply *intent* to *state*.

    Returns:
        ``(new_state, action)``.  *state* itself is left untouched.
    """
    new_state, action = _transition(state, intent, store)
    logger.info(
        "Machine: %s --%s--> %s slide=%d awaiting=%s action=%s",
        state.mode.value,
        intent.type.value,
        new_state.mode.value,
        new_state.current_slide,
        new_state.awaiting_quiz_answer,
        action.type.value,
    )
    return new_state, action


def _transition(
    state: PresentationState,
    intent: Intent,
    store: ContentStore,
) -> tuple[PresentationState, Action]:
    kind = intent.type
    # The content-question flag only lives for one turn.
    base = state.model_copy(update={"last_content_question_flag": False})

    if kind == IntentType.START:
        started = base.model_copy(update={
            "mode": PresentationMode.ACTIVE,
            "current_slide": 1,
            "awaiting_quiz_answer": False,
            "pending_question_id": None,
        })
        return started, Action(type=ActionType.SHOW_WELCOME, slide=1)

    if not state.is_active:
        return base, NO_ACTION

    slide = store.clamp(state.current_slide)

    if kind == IntentType.EXIT:
        return exit_state(base), NO_ACTION

    if kind in _NAVIGATION:
        target = store.clamp(_navigation_target(kind, intent, slide))
        moved = base.model_copy(update={
            "current_slide": target,
            "awaiting_quiz_answer": False,
            "pending_question_id": None,
        })
        return moved, Action(type=ActionType.SHOW_SLIDE, slide=target)

    if kind == IntentType.QUIZ_REQUEST:
        question = pick_question(state, slide, store)
        if question is None:
            # Slides without questions ask to continue, so "yes" moves on.
            target = store.clamp(slide + 1)
            moved = base.model_copy(update={
                "current_slide": target,
                "awaiting_quiz_answer": False,
                "pending_question_id": None,
            })
            return moved, Action(type=ActionType.SHOW_SLIDE, slide=target)
        asked = base.model_copy(update={
            "current_slide": slide,
            "awaiting_quiz_answer": True,
            "pending_question_id": question.id,
        })
        return asked, Action(
            type=ActionType.ASK_QUESTION,
            slide=slide,
            question_id=question.id,
        )

    if kind == IntentType.QUIZ_ANSWER:
        return _evaluate(base, intent, slide, store)

    if kind == IntentType.CONTENT_QUESTION:
        answered = base.model_copy(update={"last_content_question_flag": True})
        return answered, Action(
            type=ActionType.ANSWER_CONTENT_QUESTION,
            slide=slide,
            utterance=intent.utterance,
        )

    if kind == IntentType.DECLINE_CONTINUE:
        declined = base.model_copy(update={
            "awaiting_quiz_answer": False,
            "pending_question_id": None,
        })
        return declined, Action(type=ActionType.SHOW_TRANSITION, slide=slide)

    return base, Action(type=ActionType.SHOW_DEFAULT, slide=slide)


def _navigation_target(kind: IntentType, intent: Intent, current: int) -> int:
    if intent.target_slide is not None:
        return intent.target_slide
    if kind == IntentType.NAVIGATE_NEXT:
        return current + 1
    if kind == IntentType.NAVIGATE_PREV:
        return current - 1
    return current


def _evaluate(
    state: PresentationState,
    intent: Intent,
    slide: int,
    store: ContentStore,
) -> tuple[PresentationState, Action]:
    question_id = intent.question_id or state.pending_question_id
    question = store.question(question_id) if question_id else None
    choice = question.choice(intent.choice_id) if question and intent.choice_id else None
    if question is None or choice is None:
        logger.warning(
            "Machine: unusable answer question=%s choice=%s", question_id, intent.choice_id
        )
        return state, Action(type=ActionType.SHOW_DEFAULT, slide=slide)

    recorded = record_answer(state, question.id, choice.is_correct)
    recorded = recorded.model_copy(update={
        "awaiting_quiz_answer": False,
        "pending_question_id": None,
    })
    return recorded, Action(
        type=ActionType.EVALUATE_ANSWER,
        slide=slide,
        question_id=question.id,
        choice_id=choice.id,
        correct=choice.is_correct,
    )


# ---------------------------------------------------------------------------
# Quiz progress
# ---------------------------------------------------------------------------


def pick_question(
    state: PresentationState,
    slide: int,
    store: ContentStore,
) -> QuizQuestion | None:
    """First unanswered question on *slide*, else the slide's first question."""
    questions = store.questions_for_slide(slide)
    if not questions:
        return None
    for question in questions:
        if not state.is_answered(question.id):
            return question
    return questions[0]


def record_answer(
    state: PresentationState,
    question_id: str,
    correct: bool,
) -> PresentationState:
    """Mark *question_id* answered; count it correct at most once."""
    if state.is_answered(question_id):
        return state.model_copy()
    return state.model_copy(update={
        "answered_question_ids": [*state.answered_question_ids, question_id],
        "correct_count": state.correct_count + (1 if correct else 0),
    })


def reset_quiz_progress(state: PresentationState) -> PresentationState:
    return state.model_copy(update={
        "answered_question_ids": [],
        "correct_count": 0,
        "awaiting_quiz_answer": False,
        "pending_question_id": None,
    })


def exit_state(state: PresentationState) -> PresentationState:
    """Reset to Inactive; quiz progress survives until an explicit reset."""
    return state.model_copy(update={
        "mode": PresentationMode.INACTIVE,
        "current_slide": 1,
        "awaiting_quiz_answer": False,
        "pending_question_id": None,
        "last_content_question_flag": False,
        "multiple_choice_mode": False,
    })
