"""API request / response models."""

from __future__ import annotations

from pydantic import Field

from models.base import CamelModel
from models.messages import AssistantMessage, ConversationMessage, HumanMessage
from models.presentation import PresentationState, QuizProgress
from models.routing import Action, Intent, RouteName


class ContextDocument(CamelModel):
    """A document attached to a turn, already converted to text by the client."""

    name: str
    type: str = "text"
    data: str


class QuizAnswerSelection(CamelModel):
    question_id: str
    choice_id: str


class TurnRequest(CamelModel):
    """POST /api/conversation — one inbound turn.

    Presentation fields are set by UI shortcuts (buttons, slide changes) that
    already know the target state.  When all of them are absent the latest
    human message is classified instead.
    """

    messages: list[ConversationMessage] = Field(default_factory=list)
    conversation_id: str | None = None

    # ── Presentation control ─────────────────────────────────
    presentation_mode: bool | None = None
    presentation_slide: int | None = None
    show_presentation_question: bool | None = None
    is_content_question: bool | None = None
    quiz_answer: QuizAnswerSelection | None = None

    # ── General canvas flags ─────────────────────────────────
    has_artifact: bool = False
    highlighted_code: dict | None = None
    highlighted_text: dict | None = None
    language: str | None = None
    artifact_length: str | None = None
    regenerate_with_emojis: bool | None = None
    reading_level: str | None = None
    add_comments: bool | None = None
    add_logs: bool | None = None
    port_language: str | None = None
    fix_bugs: bool | None = None
    custom_quick_action_id: str | None = None
    web_search_enabled: bool | None = None

    context_documents: list[ContextDocument] = Field(default_factory=list)

    @property
    def has_presentation_flags(self) -> bool:
        return any(
            value is not None
            for value in (
                self.presentation_mode,
                self.presentation_slide,
                self.show_presentation_question,
                self.is_content_question,
                self.quiz_answer,
            )
        )

    def latest_human_message(self) -> HumanMessage | None:
        for message in reversed(self.messages):
            if isinstance(message, HumanMessage):
                return message
        return None


class RoutingDecision(CamelModel):
    """Where a turn goes next, plus the presentation fields it carries."""

    next: RouteName
    presentation_mode: bool = False
    presentation_slide: int | None = None
    show_presentation_question: bool = False
    is_content_question: bool = False
    slide_content: str | None = None
    slide_context: str | None = None
    messages: list[ConversationMessage] = Field(default_factory=list)

    intent: Intent | None = None
    action: Action | None = None
    state: PresentationState | None = None


class TurnResponse(CamelModel):
    conversation_id: str
    turn_seq: int
    decision: RoutingDecision
    message: AssistantMessage | None = None
    state: PresentationState


# ── Presentation endpoints ────────────────────────────────────


class ChoiceOut(CamelModel):
    """A choice as shown to the learner, without the answer key."""

    id: str
    text: str


class QuestionOut(CamelModel):
    id: str
    slide_number: int
    text: str
    choices: list[ChoiceOut]
    answered: bool = False


class SlideOut(CamelModel):
    number: int
    title: str
    body: str
    questions: list[QuestionOut] = Field(default_factory=list)


class SlideChangedRequest(CamelModel):
    slide_number: int


class MultipleChoiceModeRequest(CamelModel):
    """``enabled=None`` toggles the current mode."""

    enabled: bool | None = None


class QuestionNavigationRequest(CamelModel):
    direction: str = "next"  # "next" | "previous"
    index: int | None = None
    question_id: str | None = None


class QuestionNavigationResponse(CamelModel):
    question: QuestionOut
    question_index: int
    slide_number: int
    state: PresentationState


class ProgressResponse(CamelModel):
    conversation_id: str
    progress: QuizProgress


class AnswerRequest(CamelModel):
    conversation_id: str
    question_id: str
    choice_id: str
