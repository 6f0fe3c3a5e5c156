"""Tests for services.presentation_machine — pure presentation transitions."""

import pytest

from models.presentation import PresentationMode, PresentationState
from models.routing import ActionType, Intent, IntentType
from services.presentation_machine import (
    exit_state,
    pick_question,
    record_answer,
    reset_quiz_progress,
    transition,
)


def _active(slide: int = 2, **kwargs) -> PresentationState:
    return PresentationState(mode=PresentationMode.ACTIVE, current_slide=slide, **kwargs)


def _intent(kind: IntentType, **kwargs) -> Intent:
    return Intent(type=kind, **kwargs)


# ── Start / exit ──────────────────────────────────────────────


def test_start_from_inactive_shows_welcome(content_store, inactive_state):
    state, action = transition(inactive_state, _intent(IntentType.START), content_store)
    assert state.is_active
    assert state.current_slide == 1
    assert action.type == ActionType.SHOW_WELCOME
    assert action.slide == 1


def test_start_while_active_restarts(content_store):
    before = _active(5, awaiting_quiz_answer=True, pending_question_id="q9")
    state, action = transition(before, _intent(IntentType.START), content_store)
    assert state.current_slide == 1
    assert not state.awaiting_quiz_answer
    assert action.type == ActionType.SHOW_WELCOME


@pytest.mark.parametrize(
    "kind",
    [IntentType.NAVIGATE_NEXT, IntentType.QUIZ_REQUEST, IntentType.CONTENT_QUESTION, IntentType.FALLBACK],
)
def test_inactive_ignores_everything_but_start(content_store, inactive_state, kind):
    state, action = transition(inactive_state, _intent(kind), content_store)
    assert not state.is_active
    assert action.type == ActionType.NONE


def test_exit_resets_but_keeps_progress(content_store):
    before = _active(
        6,
        awaiting_quiz_answer=True,
        pending_question_id="q10",
        answered_question_ids=["q1"],
        correct_count=1,
        multiple_choice_mode=True,
    )
    state, action = transition(before, _intent(IntentType.EXIT), content_store)
    assert state.mode == PresentationMode.INACTIVE
    assert state.current_slide == 1
    assert not state.awaiting_quiz_answer
    assert state.pending_question_id is None
    assert not state.multiple_choice_mode
    assert state.answered_question_ids == ["q1"]
    assert action.type == ActionType.NONE


def test_transition_does_not_mutate_input(content_store):
    before = _active(3)
    snapshot = before.model_dump()
    transition(before, _intent(IntentType.NAVIGATE_NEXT, target_slide=4), content_store)
    assert before.model_dump() == snapshot


# ── Navigation ────────────────────────────────────────────────


def test_navigate_next_clamped_at_last_slide(content_store):
    state, action = transition(_active(7), _intent(IntentType.NAVIGATE_NEXT), content_store)
    assert state.current_slide == 7
    assert action.type == ActionType.SHOW_SLIDE
    assert action.slide == 7


def test_navigate_prev_clamped_at_first_slide(content_store):
    state, _ = transition(_active(1), _intent(IntentType.NAVIGATE_PREV), content_store)
    assert state.current_slide == 1


def test_navigate_to_out_of_range_is_clamped(content_store):
    state, action = transition(
        _active(3), _intent(IntentType.NAVIGATE_TO, target_slide=42), content_store
    )
    assert state.current_slide == 7
    assert action.slide == 7


def test_navigation_clears_pending_question(content_store):
    before = _active(2, awaiting_quiz_answer=True, pending_question_id="q1")
    state, _ = transition(before, _intent(IntentType.NAVIGATE_TO, target_slide=5), content_store)
    assert state.current_slide == 5
    assert not state.awaiting_quiz_answer
    assert state.pending_question_id is None


# ── Quiz ──────────────────────────────────────────────────────


def test_quiz_request_asks_first_unanswered(content_store):
    before = _active(2, answered_question_ids=["q1"], correct_count=1)
    state, action = transition(before, _intent(IntentType.QUIZ_REQUEST), content_store)
    assert state.awaiting_quiz_answer
    assert state.pending_question_id == "q2"
    assert action.type == ActionType.ASK_QUESTION
    assert action.question_id == "q2"


def test_quiz_request_on_slide_without_questions_moves_on(content_store, active_state):
    state, action = transition(active_state, _intent(IntentType.QUIZ_REQUEST), content_store)
    assert state.current_slide == 2
    assert not state.awaiting_quiz_answer
    assert action.type == ActionType.SHOW_SLIDE
    assert action.slide == 2


def test_quiz_answer_correct(content_store):
    before = _active(4, awaiting_quiz_answer=True, pending_question_id="q6")
    intent = _intent(IntentType.QUIZ_ANSWER, question_id="q6", choice_id="q6-c")
    state, action = transition(before, intent, content_store)
    assert action.type == ActionType.EVALUATE_ANSWER
    assert action.correct is True
    assert state.answered_question_ids == ["q6"]
    assert state.correct_count == 1
    assert not state.awaiting_quiz_answer


def test_quiz_answer_incorrect(content_store):
    before = _active(4, awaiting_quiz_answer=True, pending_question_id="q6")
    intent = _intent(IntentType.QUIZ_ANSWER, choice_id="q6-a")
    state, action = transition(before, intent, content_store)
    assert action.correct is False
    assert state.answered_question_ids == ["q6"]
    assert state.correct_count == 0


def test_quiz_answer_with_unknown_choice_shows_default(content_store):
    before = _active(4, awaiting_quiz_answer=True, pending_question_id="q6")
    intent = _intent(IntentType.QUIZ_ANSWER, question_id="q6", choice_id="q7-a")
    state, action = transition(before, intent, content_store)
    assert action.type == ActionType.SHOW_DEFAULT
    assert state.answered_question_ids == []


def test_content_question_sets_flag_for_one_turn(content_store):
    state, action = transition(
        _active(4), _intent(IntentType.CONTENT_QUESTION, utterance="why?"), content_store
    )
    assert state.last_content_question_flag
    assert action.type == ActionType.ANSWER_CONTENT_QUESTION
    assert action.utterance == "why?"

    state, _ = transition(state, _intent(IntentType.FALLBACK), content_store)
    assert not state.last_content_question_flag


def test_decline_shows_transition(content_store):
    before = _active(3, awaiting_quiz_answer=True, pending_question_id="q4")
    state, action = transition(before, _intent(IntentType.DECLINE_CONTINUE), content_store)
    assert action.type == ActionType.SHOW_TRANSITION
    assert state.current_slide == 3
    assert not state.awaiting_quiz_answer


def test_fallback_shows_default(content_store):
    _, action = transition(_active(3), _intent(IntentType.FALLBACK), content_store)
    assert action.type == ActionType.SHOW_DEFAULT
    assert action.slide == 3


# ── Quiz progress helpers ─────────────────────────────────────


def test_pick_question_wraps_to_first_when_all_answered(content_store):
    state = _active(5, answered_question_ids=["q9"])
    assert pick_question(state, 5, content_store).id == "q9"
    assert pick_question(state, 1, content_store) is None


def test_record_answer_is_monotone(content_store):
    state = record_answer(_active(2), "q1", True)
    again = record_answer(state, "q1", False)
    assert again.answered_question_ids == ["q1"]
    assert again.correct_count == 1


def test_reset_quiz_progress():
    state = reset_quiz_progress(_active(2, answered_question_ids=["q1", "q2"], correct_count=2))
    assert state.answered_question_ids == []
    assert state.correct_count == 0
    assert state.is_active


def test_exit_state_is_idempotent():
    once = exit_state(_active(4))
    assert exit_state(once) == once
