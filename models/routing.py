"""Routing models — classified intents and state-machine actions."""

from __future__ import annotations

from enum import Enum

from models.base import CamelModel


class IntentType(str, Enum):
    """Closed set of things a user utterance can mean to the presentation."""

    START = "start"
    EXIT = "exit"
    NAVIGATE_NEXT = "navigate_next"
    NAVIGATE_PREV = "navigate_prev"
    NAVIGATE_TO = "navigate_to"
    QUIZ_REQUEST = "quiz_request"
    QUIZ_ANSWER = "quiz_answer"
    DECLINE_CONTINUE = "decline_continue"
    CONTENT_QUESTION = "content_question"
    FALLBACK = "fallback"


class Intent(CamelModel):
    type: IntentType
    target_slide: int | None = None  # navigation intents only
    question_id: str | None = None  # quiz answers submitted from the panel
    choice_id: str | None = None
    utterance: str = ""


class ActionType(str, Enum):
    """What the composer should produce for the turn."""

    SHOW_WELCOME = "show_welcome"
    SHOW_SLIDE = "show_slide"
    ASK_QUESTION = "ask_question"
    EVALUATE_ANSWER = "evaluate_answer"
    ANSWER_CONTENT_QUESTION = "answer_content_question"
    SHOW_TRANSITION = "show_transition"
    SHOW_DEFAULT = "show_default"
    NONE = "none"


class Action(CamelModel):
    type: ActionType
    slide: int | None = None
    question_id: str | None = None
    choice_id: str | None = None
    correct: bool | None = None
    utterance: str = ""


NO_ACTION = Action(type=ActionType.NONE)


class RouteName(str, Enum):
    """Downstream handler names a turn can be routed to."""

    PRESENTATION = "presentationModeHandler"
    UPDATE_ARTIFACT = "updateArtifact"
    UPDATE_HIGHLIGHTED_TEXT = "updateHighlightedText"
    REWRITE_ARTIFACT_THEME = "rewriteArtifactTheme"
    REWRITE_CODE_ARTIFACT_THEME = "rewriteCodeArtifactTheme"
    CUSTOM_ACTION = "customAction"
    WEB_SEARCH = "webSearch"
    GENERATE_ARTIFACT = "generateArtifact"
    REWRITE_ARTIFACT = "rewriteArtifact"
    REPLY_TO_GENERAL_INPUT = "replyToGeneralInput"
