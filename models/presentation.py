"""Presentation models — slides, quiz bank entries and per-session state.

Content models (Slide, SlideContext, Choice, QuizQuestion) are frozen: the
dataset is defined once at import time and never changes at runtime.
PresentationState is the only mutable record; it is replaced wholesale by
state-machine transitions rather than edited field by field.
"""

from __future__ import annotations

from enum import Enum

from pydantic import ConfigDict, Field, model_validator

from models.base import CamelModel


class PresentationMode(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


# ── Content ───────────────────────────────────────────────────


class SlideContext(CamelModel):
    """Title plus background text used only to ground content answers."""

    model_config = ConfigDict(frozen=True)

    title: str
    details: str


class Slide(CamelModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    body: str
    title: str = ""
    details: str = ""


class Choice(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    is_correct: bool = False


class QuizQuestion(CamelModel):
    """A multiple-choice question tied to one slide."""

    model_config = ConfigDict(frozen=True)

    id: str
    slide_number: int = Field(ge=1)
    text: str
    choices: tuple[Choice, ...]

    @model_validator(mode="after")
    def _exactly_one_correct(self) -> QuizQuestion:
        correct = sum(1 for c in self.choices if c.is_correct)
        if correct != 1:
            raise ValueError(
                f"question {self.id} must have exactly one correct choice, found {correct}"
            )
        return self

    @property
    def correct_choice(self) -> Choice:
        return next(c for c in self.choices if c.is_correct)

    def choice(self, choice_id: str) -> Choice | None:
        return next((c for c in self.choices if c.id == choice_id), None)

    def choice_by_letter(self, letter: str) -> Choice | None:
        """Map ``a``/``b``/``c``... onto the choice at that position."""
        if len(letter) != 1 or not letter.isalpha():
            return None
        index = ord(letter.lower()) - ord("a")
        if 0 <= index < len(self.choices):
            return self.choices[index]
        return None


# ── Session state ─────────────────────────────────────────────


class PresentationState(CamelModel):
    """Per-conversation presentation state.

    ``answered_question_ids`` keeps insertion order and never shrinks except
    through an explicit quiz reset.
    """

    mode: PresentationMode = PresentationMode.INACTIVE
    current_slide: int = Field(default=1, ge=1)
    awaiting_quiz_answer: bool = False
    pending_question_id: str | None = None
    last_content_question_flag: bool = False
    answered_question_ids: list[str] = Field(default_factory=list)
    correct_count: int = Field(default=0, ge=0)

    # Multiple-choice panel
    multiple_choice_mode: bool = False
    current_question_index: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _awaiting_requires_active(self) -> PresentationState:
        if self.awaiting_quiz_answer and self.mode != PresentationMode.ACTIVE:
            raise ValueError("awaiting_quiz_answer requires an active presentation")
        return self

    @property
    def is_active(self) -> bool:
        return self.mode == PresentationMode.ACTIVE

    def is_answered(self, question_id: str) -> bool:
        return question_id in self.answered_question_ids


class QuizProgress(CamelModel):
    answered: list[str] = Field(default_factory=list)
    answered_count: int = 0
    correct_count: int = 0
    total_questions: int = 0
