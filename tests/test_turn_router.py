"""Tests for agents.turn_router — flag precedence, presentation routing and fallbacks."""

from unittest.mock import AsyncMock

import pytest

from agents.turn_router import (
    CONTEXT_DOCUMENTS_HEADER,
    build_context_message,
    general_flag_route,
    route_turn,
)
from errors.exceptions import RoutingError
from models.messages import HumanMessage
from models.presentation import PresentationMode, PresentationState
from models.request import ContextDocument, TurnRequest
from models.routing import ActionType, IntentType, RouteName


def _active(slide: int = 2, **kwargs) -> PresentationState:
    return PresentationState(mode=PresentationMode.ACTIVE, current_slide=slide, **kwargs)


def _request(text: str = "", **flags) -> TurnRequest:
    messages = [HumanMessage(content=text)] if text else []
    return TurnRequest(messages=messages, conversation_id="conv-router", **flags)


@pytest.fixture
def resolver() -> AsyncMock:
    return AsyncMock(return_value=RouteName.REPLY_TO_GENERAL_INPUT)


# ── Inactive: general flags ───────────────────────────────────


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ({"highlighted_code": {"startCharIndex": 0, "endCharIndex": 4}}, RouteName.UPDATE_ARTIFACT),
        ({"highlighted_text": {"fullMarkdown": "x"}}, RouteName.UPDATE_HIGHLIGHTED_TEXT),
        ({"language": "spanish"}, RouteName.REWRITE_ARTIFACT_THEME),
        ({"artifact_length": "shortest"}, RouteName.REWRITE_ARTIFACT_THEME),
        ({"regenerate_with_emojis": True}, RouteName.REWRITE_ARTIFACT_THEME),
        ({"reading_level": "child"}, RouteName.REWRITE_ARTIFACT_THEME),
        ({"add_comments": True}, RouteName.REWRITE_CODE_ARTIFACT_THEME),
        ({"add_logs": True}, RouteName.REWRITE_CODE_ARTIFACT_THEME),
        ({"port_language": "rust"}, RouteName.REWRITE_CODE_ARTIFACT_THEME),
        ({"fix_bugs": True}, RouteName.REWRITE_CODE_ARTIFACT_THEME),
        ({"custom_quick_action_id": "qa-1"}, RouteName.CUSTOM_ACTION),
        ({"web_search_enabled": True}, RouteName.WEB_SEARCH),
    ],
)
def test_general_flag_route(flags, expected):
    assert general_flag_route(_request("hello", **flags)) == expected


def test_general_flag_priority():
    request = _request(
        "hello",
        highlighted_text={"fullMarkdown": "x"},
        language="french",
        fix_bugs=True,
        web_search_enabled=True,
    )
    assert general_flag_route(request) == RouteName.UPDATE_HIGHLIGHTED_TEXT


def test_no_general_flag():
    assert general_flag_route(_request("hello")) is None


async def test_inactive_flag_routes_without_resolver(content_store, inactive_state, resolver):
    decision = await route_turn(
        _request("translate this", language="french"), inactive_state, content_store,
        resolver=resolver,
    )
    assert decision.next == RouteName.REWRITE_ARTIFACT_THEME
    assert not decision.presentation_mode
    resolver.assert_not_awaited()


async def test_general_flags_checked_before_start(content_store, inactive_state, resolver):
    decision = await route_turn(
        _request("start presentation", web_search_enabled=True), inactive_state, content_store,
        resolver=resolver,
    )
    assert decision.next == RouteName.WEB_SEARCH


# ── Inactive: start and resolver ──────────────────────────────


async def test_inactive_start_command(content_store, inactive_state, resolver):
    decision = await route_turn(
        _request("Start carvedilol presentation"), inactive_state, content_store, resolver=resolver
    )
    assert decision.next == RouteName.PRESENTATION
    assert decision.presentation_mode
    assert decision.presentation_slide == 1
    assert decision.action.type == ActionType.SHOW_WELCOME
    assert decision.state.is_active
    resolver.assert_not_awaited()


async def test_inactive_resolver_chooses(content_store, inactive_state, resolver):
    resolver.return_value = RouteName.GENERATE_ARTIFACT
    decision = await route_turn(
        _request("write me a poem", has_artifact=False), inactive_state, content_store,
        resolver=resolver,
    )
    assert decision.next == RouteName.GENERATE_ARTIFACT
    resolver.assert_awaited_once()
    args = resolver.await_args.args
    assert args[0] == "write me a poem"
    assert args[2] is False


async def test_no_route_raises(content_store, inactive_state):
    with pytest.raises(RoutingError, match="Route not found"):
        await route_turn(
            _request("hello"), inactive_state, content_store,
            resolver=AsyncMock(return_value=None),
        )


# ── Active: classified turns ──────────────────────────────────


async def test_active_navigation(content_store, resolver):
    decision = await route_turn(_request("next slide"), _active(2), content_store, resolver=resolver)
    assert decision.next == RouteName.PRESENTATION
    assert decision.presentation_slide == 3
    assert decision.slide_content == content_store.slide_body(3)
    assert decision.intent.type == IntentType.NAVIGATE_NEXT
    resolver.assert_not_awaited()


async def test_active_ignores_general_flags(content_store, resolver):
    decision = await route_turn(
        _request("next slide", web_search_enabled=True), _active(2), content_store,
        resolver=resolver,
    )
    assert decision.next == RouteName.PRESENTATION


async def test_active_exit_stays_with_presentation_handler(content_store, resolver):
    decision = await route_turn(_request("exit"), _active(5), content_store, resolver=resolver)
    assert decision.next == RouteName.PRESENTATION
    assert not decision.presentation_mode
    assert decision.presentation_slide is None
    assert not decision.state.is_active


async def test_active_quiz_request_sets_show_question(content_store, resolver):
    decision = await route_turn(_request("yes"), _active(4), content_store, resolver=resolver)
    assert decision.show_presentation_question
    assert decision.state.pending_question_id == "q6"


async def test_active_answer_uses_pending_question(content_store, resolver):
    state = _active(4, awaiting_quiz_answer=True, pending_question_id="q6")
    decision = await route_turn(_request("c"), state, content_store, resolver=resolver)
    assert decision.action.type == ActionType.EVALUATE_ANSWER
    assert decision.action.correct is True
    assert decision.state.correct_count == 1


async def test_active_content_question(content_store, resolver):
    decision = await route_turn(
        _request("Why is the NNT so low?"), _active(4), content_store, resolver=resolver
    )
    assert decision.is_content_question
    assert decision.action.type == ActionType.ANSWER_CONTENT_QUESTION
    assert decision.slide_context == content_store.slide_context(4).details


# ── Explicit presentation fields ──────────────────────────────


async def test_ui_start_shortcut(content_store, inactive_state, resolver):
    request = _request(
        "Start carvedilol presentation", presentation_mode=True, presentation_slide=1
    )
    decision = await route_turn(request, inactive_state, content_store, resolver=resolver)
    assert decision.action.type == ActionType.SHOW_WELCOME
    assert decision.presentation_slide == 1


async def test_flags_start_and_jump(content_store, inactive_state, resolver):
    request = _request("go to slide 4", presentation_mode=True, presentation_slide=4)
    decision = await route_turn(request, inactive_state, content_store, resolver=resolver)
    assert decision.state.is_active
    assert decision.action.type == ActionType.SHOW_SLIDE
    assert decision.presentation_slide == 4


async def test_flag_slide_is_clamped(content_store, resolver):
    request = _request("go to slide 12", presentation_mode=True, presentation_slide=12)
    decision = await route_turn(request, _active(3), content_store, resolver=resolver)
    assert decision.presentation_slide == 7


async def test_flags_override_text(content_store, resolver):
    """Flags win over what the text would classify as."""
    request = _request("exit", presentation_mode=True, show_presentation_question=True)
    decision = await route_turn(request, _active(2), content_store, resolver=resolver)
    assert decision.state.is_active
    assert decision.action.type == ActionType.ASK_QUESTION
    assert decision.show_presentation_question


async def test_flag_exit(content_store, resolver):
    request = _request("Exit presentation mode", presentation_mode=False)
    decision = await route_turn(request, _active(6), content_store, resolver=resolver)
    assert decision.next == RouteName.PRESENTATION
    assert not decision.presentation_mode
    assert decision.action.type == ActionType.NONE


async def test_flag_quiz_answer(content_store, resolver):
    request = _request(
        "answer",
        presentation_mode=True,
        quiz_answer={"questionId": "q12", "choiceId": "q12-a"},
    )
    decision = await route_turn(request, _active(7), content_store, resolver=resolver)
    assert decision.action.type == ActionType.EVALUATE_ANSWER
    assert decision.action.correct is False
    assert decision.state.answered_question_ids == ["q12"]


async def test_flag_content_question(content_store, resolver):
    request = _request("How long between dose steps?", is_content_question=True)
    decision = await route_turn(request, _active(7), content_store, resolver=resolver)
    assert decision.is_content_question
    assert decision.action.utterance == "How long between dose steps?"


# ── Context documents ─────────────────────────────────────────


def test_build_context_message():
    message = build_context_message([
        ContextDocument(name="notes.txt", data="Dose with food."),
        ContextDocument(name="trial.md", type="markdown", data="COPERNICUS"),
    ])
    assert message.content.startswith(CONTEXT_DOCUMENTS_HEADER)
    assert "### notes.txt (text)" in message.content
    assert "COPERNICUS" in message.content
    assert message.metadata["contextDocuments"] == ["notes.txt", "trial.md"]
    assert build_context_message([]) is None


async def test_context_message_precedes_latest_human(content_store, inactive_state, resolver):
    request = _request("summarize my notes")
    request.context_documents = [ContextDocument(name="notes.txt", data="Dose with food.")]
    decision = await route_turn(request, inactive_state, content_store, resolver=resolver)
    assert len(decision.messages) == 2
    assert decision.messages[0].content.startswith(CONTEXT_DOCUMENTS_HEADER)
    assert decision.messages[-1].content == "summarize my notes"
