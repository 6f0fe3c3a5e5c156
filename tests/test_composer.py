"""Tests for agents.composer — templates, call-to-action handling and content answers."""

import pytest
from pydantic_ai.messages import ModelResponse, SystemPromptPart, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from agents.composer import (
    APOLOGY,
    CTA_CONTINUE,
    CTA_QUIZ,
    SHOW_QUESTION_MARKER,
    ResponseComposer,
    _content_agent,
    build_assistant_message,
    call_to_action,
    ensure_call_to_action,
)
from models.presentation import PresentationMode, PresentationState
from models.routing import Action, ActionType


def _active(slide: int = 2, **kwargs) -> PresentationState:
    return PresentationState(mode=PresentationMode.ACTIVE, current_slide=slide, **kwargs)


@pytest.fixture
def composer(content_store) -> ResponseComposer:
    return ResponseComposer(content_store)


# ── Call to action ────────────────────────────────────────────


def test_call_to_action_by_slide():
    assert call_to_action(1) == CTA_CONTINUE
    for slide in range(2, 8):
        assert call_to_action(slide) == CTA_QUIZ


def test_ensure_call_to_action_appends_once():
    text = ensure_call_to_action("Carvedilol blocks beta receptors.", 3)
    assert text.endswith(CTA_QUIZ)
    assert text.count(CTA_QUIZ) == 1


def test_ensure_call_to_action_is_idempotent():
    once = ensure_call_to_action("Body text.", 1)
    assert ensure_call_to_action(once, 1) == once


def test_ensure_call_to_action_respects_existing_phrasing():
    text = "Great point. Would you like to test your knowledge on this slide?"
    assert ensure_call_to_action(text, 5) == text


def test_ensure_call_to_action_case_insensitive():
    text = f"Done.\n\n{CTA_CONTINUE.upper()}"
    assert ensure_call_to_action(text, 1) == text


def test_apology_carries_no_call_to_action():
    assert ensure_call_to_action(APOLOGY, 2) != APOLOGY


# ── Deterministic templates ───────────────────────────────────


async def test_welcome(composer, content_store):
    reply = await composer.compose(Action(type=ActionType.SHOW_WELCOME, slide=1), _active(1))
    assert reply.text.startswith(content_store.slide_body(1))
    assert reply.text.endswith(CTA_CONTINUE)
    assert reply.text.count(CTA_CONTINUE) == 1
    assert reply.slide == 1


async def test_show_slide(composer, content_store):
    reply = await composer.compose(Action(type=ActionType.SHOW_SLIDE, slide=4), _active(4))
    assert reply.text.startswith("【Slide 4】")
    assert content_store.slide_body(4) in reply.text
    assert reply.text.count(CTA_QUIZ) == 1
    assert not reply.show_question


async def test_show_transition(composer):
    reply = await composer.compose(Action(type=ActionType.SHOW_TRANSITION, slide=3), _active(3))
    assert reply.text.startswith("Let's continue with the presentation. Here's slide 3:")
    assert reply.text.endswith(CTA_QUIZ)


async def test_show_default_uses_state_slide(composer):
    reply = await composer.compose(Action(type=ActionType.SHOW_DEFAULT), _active(6))
    assert reply.slide == 6
    assert reply.text.startswith("【Slide 6】")


async def test_ask_question(composer, content_store):
    action = Action(type=ActionType.ASK_QUESTION, slide=4, question_id="q6")
    reply = await composer.compose(action, _active(4))
    assert reply.text.startswith("Let's test your knowledge on slide 4:")
    assert SHOW_QUESTION_MARKER in reply.text
    assert "A) 15%" in reply.text
    assert "C) 35%" in reply.text
    assert CTA_QUIZ not in reply.text
    assert content_store.slide_body(4) not in reply.text
    assert reply.show_question
    assert reply.question_id == "q6"


async def test_ask_question_without_question(composer):
    reply = await composer.compose(Action(type=ActionType.ASK_QUESTION, slide=1), _active(1))
    assert not reply.show_question
    assert reply.text.endswith(CTA_CONTINUE)


async def test_evaluate_correct(composer):
    state = _active(4, answered_question_ids=["q6"], correct_count=1)
    action = Action(
        type=ActionType.EVALUATE_ANSWER, slide=4, question_id="q6", choice_id="q6-c", correct=True
    )
    reply = await composer.compose(action, state)
    assert reply.text.startswith("Correct!")
    assert "1 of 14" in reply.text
    assert reply.text.endswith(CTA_QUIZ)


async def test_evaluate_incorrect_names_right_answer(composer):
    state = _active(4, answered_question_ids=["q6"])
    action = Action(
        type=ActionType.EVALUATE_ANSWER, slide=4, question_id="q6", choice_id="q6-a", correct=False
    )
    reply = await composer.compose(action, state)
    assert reply.text.startswith("Not quite.")
    assert '"15%"' in reply.text
    assert "**35%**" in reply.text


async def test_exit_acknowledgement(composer):
    reply = await composer.compose(Action(type=ActionType.NONE), PresentationState())
    assert not reply.presentation_mode
    assert CTA_QUIZ not in reply.text
    assert CTA_CONTINUE not in reply.text


# ── Content answers ───────────────────────────────────────────


async def test_content_answer_gets_call_to_action(composer):
    test_model = TestModel(custom_output_text="Carvedilol cut mortality by 35% in COPERNICUS.")
    action = Action(type=ActionType.ANSWER_CONTENT_QUESTION, slide=4, utterance="what did it show?")

    with _content_agent.override(model=test_model):
        reply = await composer.compose(action, _active(4))

    assert reply.text.startswith("Carvedilol cut mortality by 35%")
    assert reply.text.count(CTA_QUIZ) == 1


async def test_content_answer_keeps_model_call_to_action(composer):
    model_text = f"It is dosed twice daily.\n\n{CTA_QUIZ}"
    action = Action(type=ActionType.ANSWER_CONTENT_QUESTION, slide=7, utterance="how is it dosed?")

    with _content_agent.override(model=TestModel(custom_output_text=model_text)):
        reply = await composer.compose(action, _active(7))

    assert reply.text == model_text


async def test_content_prompt_is_grounded_in_current_slide(composer):
    captured: list[str] = []

    def _capture(messages, info: AgentInfo) -> ModelResponse:
        captured.append("".join(
            part.content for part in messages[0].parts if isinstance(part, SystemPromptPart)
        ))
        return ModelResponse(parts=[TextPart(content="Answer.")])

    with _content_agent.override(model=FunctionModel(_capture)):
        await composer.answer_content_question(4, "What are the main risk factors?")

    prompt = captured[0]
    assert "You are currently on Slide 4" in prompt
    assert "COPERNICUS" in prompt
    assert "## Risk Factors" in prompt


async def test_content_answer_failure_falls_back(composer):
    def _boom(messages, info: AgentInfo) -> ModelResponse:
        raise RuntimeError("provider unavailable")

    with _content_agent.override(model=FunctionModel(_boom)):
        text = await composer.answer_content_question(2, "why is heart failure rising?")

    assert text == f"{APOLOGY}\n\n{CTA_QUIZ}"


async def test_content_answer_on_slide_one_failure(composer):
    def _boom(messages, info: AgentInfo) -> ModelResponse:
        raise RuntimeError("provider unavailable")

    with _content_agent.override(model=FunctionModel(_boom)):
        text = await composer.answer_content_question(1, "what is this about?")

    assert text.startswith(APOLOGY)
    assert text.endswith(CTA_CONTINUE)


# ── Assistant message ─────────────────────────────────────────


async def test_build_assistant_message(composer, content_store):
    reply = await composer.compose(
        Action(type=ActionType.ASK_QUESTION, slide=2, question_id="q1"), _active(2)
    )
    message = build_assistant_message(reply, content_store, turn_seq=3, message_id="msg-fixed")
    assert message.id == "msg-fixed"
    assert message.turn_seq == 3
    assert message.metadata.presentation_mode
    assert message.metadata.current_slide == 2
    assert message.metadata.current_slide_content == content_store.slide_body(2)
    assert message.metadata.show_question
    assert message.metadata.question_id == "q1"
