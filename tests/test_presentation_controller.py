"""Tests for services.presentation_controller — state writes and the events they publish."""

import pytest

from errors.exceptions import UnknownQuestionError
from models.events import EventType
from models.presentation import PresentationMode, PresentationState
from services.presentation_controller import PresentationController


def _active(slide: int = 2, **kwargs) -> PresentationState:
    return PresentationState(mode=PresentationMode.ACTIVE, current_slide=slide, **kwargs)


@pytest.fixture
def published(bus) -> list:
    events: list = []
    for event_type in EventType:
        bus.subscribe(event_type, events.append)
    return events


@pytest.fixture
def controller(content_store, bus) -> PresentationController:
    return PresentationController(content_store, bus)


def _types(events) -> list[EventType]:
    return [event.type for event in events]


# ── apply ─────────────────────────────────────────────────────


async def test_activation_publishes_mode_change_and_goto(controller, session, published):
    await controller.apply(session, _active(1))
    assert _types(published) == [EventType.PRESENTATION_MODE_CHANGE, EventType.GO_TO_SLIDE]
    assert published[0].is_active
    assert published[1].slide_number == 1
    assert session.presentation.is_active


async def test_slide_move_publishes_goto(controller, session, published):
    session.presentation = _active(2)
    await controller.apply(session, _active(3))
    assert _types(published) == [EventType.GO_TO_SLIDE]
    assert published[0].conversation_id == session.conversation_id


async def test_frame_originated_move_is_not_echoed(controller, session, published):
    session.presentation = _active(2)
    await controller.apply(session, _active(5), from_frame=True)
    assert published == []
    assert session.presentation.current_slide == 5


async def test_slide_move_marks_slide_processed(controller, session):
    session.presentation = _active(2)
    await controller.apply(session, _active(6))
    assert session.ui.last_processed_slide == 6


async def test_frame_originated_move_leaves_marker_to_frame(controller, session):
    session.presentation = _active(2)
    session.ui.last_processed_slide = 2
    await controller.apply(session, _active(5), from_frame=True)
    assert session.ui.last_processed_slide == 2


async def test_same_slide_publishes_nothing(controller, session, published):
    session.presentation = _active(4)
    await controller.apply(session, _active(4, awaiting_quiz_answer=True, pending_question_id="q6"))
    assert published == []


async def test_exit_publishes_and_resets_slide_tracking(controller, session, published):
    session.presentation = _active(4)
    session.ui.last_processed_slide = 4

    await controller.apply(session, PresentationState())

    assert _types(published) == [
        EventType.PRESENTATION_MODE_CHANGE,
        EventType.EXIT_PRESENTATION,
    ]
    assert not published[0].is_active
    assert session.ui.last_processed_slide == 0


async def test_apply_aligns_panel_on_slide_change(controller, session):
    session.presentation = _active(2, multiple_choice_mode=True)
    stored = await controller.apply(session, _active(4, multiple_choice_mode=True))
    assert stored.current_question_index == 5  # q6


# ── Multiple-choice mode ──────────────────────────────────────


async def test_enable_multiple_choice_aligns_to_slide(controller, session, published):
    session.presentation = _active(3)
    state = await controller.set_multiple_choice_mode(session, True)
    assert state.multiple_choice_mode
    assert state.current_question_index == 3  # q4
    assert _types(published) == [EventType.MULTIPLE_CHOICE_MODE_CHANGE]
    assert published[0].is_active


async def test_toggle_multiple_choice(controller, session):
    session.presentation = _active(2)
    assert (await controller.set_multiple_choice_mode(session)).multiple_choice_mode
    assert not (await controller.set_multiple_choice_mode(session)).multiple_choice_mode


async def test_multiple_choice_requires_active_presentation(controller, session, published):
    state = await controller.set_multiple_choice_mode(session, True)
    assert not state.multiple_choice_mode
    assert published == []


# ── Question navigation ───────────────────────────────────────


async def test_navigate_next_moves_slide_along(controller, session, published):
    session.presentation = _active(2, multiple_choice_mode=True, current_question_index=2)
    state, question = await controller.navigate_question(session, direction="next")
    assert question.id == "q4"
    assert state.current_slide == 3
    assert _types(published) == [EventType.GO_TO_SLIDE]


async def test_navigate_previous_wraps(controller, session):
    session.presentation = _active(2, multiple_choice_mode=True)
    state, question = await controller.navigate_question(session, direction="previous")
    assert question.id == "q14"
    assert state.current_slide == 7


async def test_navigate_by_id_beats_index(controller, session):
    session.presentation = _active(2, multiple_choice_mode=True)
    _, question = await controller.navigate_question(session, index=0, question_id="q11")
    assert question.id == "q11"
    assert session.presentation.current_slide == 6


async def test_navigate_keeps_requested_question_over_alignment(controller, session):
    session.presentation = _active(2, multiple_choice_mode=True)
    state, question = await controller.navigate_question(session, question_id="q8")
    assert question.id == "q8"
    assert state.current_question_index == 7


async def test_navigate_clears_pending_question_on_slide_move(controller, session):
    session.presentation = _active(
        2, multiple_choice_mode=True, awaiting_quiz_answer=True, pending_question_id="q1"
    )
    state, _ = await controller.navigate_question(session, question_id="q9")
    assert not state.awaiting_quiz_answer
    assert state.pending_question_id is None


async def test_navigate_unknown_question(controller, session):
    session.presentation = _active(2)
    with pytest.raises(UnknownQuestionError):
        await controller.navigate_question(session, question_id="q99")
    with pytest.raises(UnknownQuestionError):
        await controller.navigate_question(session, index=14)


# ── Progress ──────────────────────────────────────────────────


async def test_reset_progress(controller, session):
    session.presentation = _active(5, answered_question_ids=["q1", "q9"], correct_count=2)
    state = await controller.reset_progress(session)
    assert state.answered_question_ids == []
    assert state.correct_count == 0
    assert state.current_slide == 5


async def test_default_bus_is_the_app_bus(content_store, session):
    from services.event_bus import get_event_bus

    seen: list = []
    get_event_bus().subscribe(EventType.GO_TO_SLIDE, seen.append)
    await PresentationController(content_store).apply(session, _active(1))
    assert len(seen) == 1
