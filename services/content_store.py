"""ContentStore — immutable lookup over slides and the quiz bank.

Lookups never raise for an unknown slide number: a missing body comes
back as :data:`SLIDE_NOT_AVAILABLE`, a missing context as ``None`` and a
missing question list as empty, so composition can always degrade to a
default string.  Callers are still expected to clamp slide numbers.
"""

from __future__ import annotations

import logging

from models.presentation import QuizQuestion, Slide, SlideContext
from services.slide_content import (
    QUIZ_QUESTIONS,
    RISK_CONTEXT,
    SLIDE_CONTEXT,
    SLIDE_NOT_AVAILABLE,
    SLIDES_CONTENT,
    TOTAL_SLIDES,
)

logger = logging.getLogger(__name__)


class ContentStore:
    """Read-only slide / question store.  Safe to share across sessions."""

    def __init__(
        self,
        slides: dict[int, str],
        contexts: dict[int, dict[str, str]],
        questions: list[dict],
        risk_context: dict[str, str] | None = None,
        topic: str = "carvedilol",
    ) -> None:
        self._slides: dict[int, Slide] = {
            number: Slide(
                number=number,
                body=body,
                title=contexts.get(number, {}).get("title", ""),
                details=contexts.get(number, {}).get("details", ""),
            )
            for number, body in sorted(slides.items())
        }
        self._contexts: dict[int, SlideContext] = {
            number: SlideContext(**entry) for number, entry in contexts.items()
        }
        self._questions: tuple[QuizQuestion, ...] = tuple(
            QuizQuestion.model_validate(q) for q in questions
        )
        self._by_slide: dict[int, tuple[QuizQuestion, ...]] = {
            number: tuple(q for q in self._questions if q.slide_number == number)
            for number in self._slides
        }
        self._risk_context = dict(risk_context or {})
        self.topic = topic

    # ── Slides ───────────────────────────────────────────────

    @property
    def total_slides(self) -> int:
        return len(self._slides)

    def clamp(self, slide_number: int) -> int:
        """Force *slide_number* into ``[1, total_slides]``."""
        return max(1, min(slide_number, self.total_slides))

    def has_slide(self, slide_number: int) -> bool:
        return slide_number in self._slides

    def slide(self, slide_number: int) -> Slide | None:
        return self._slides.get(slide_number)

    def slides(self) -> list[Slide]:
        return list(self._slides.values())

    def slide_body(self, slide_number: int) -> str:
        slide = self._slides.get(slide_number)
        if slide is None:
            logger.warning("ContentStore: no body for slide %s", slide_number)
            return SLIDE_NOT_AVAILABLE
        return slide.body

    def slide_context(self, slide_number: int) -> SlideContext | None:
        return self._contexts.get(slide_number)

    def slide_title(self, slide_number: int) -> str:
        context = self._contexts.get(slide_number)
        return context.title if context else ""

    @property
    def risk_context(self) -> dict[str, str]:
        return dict(self._risk_context)

    # ── Quiz bank ────────────────────────────────────────────

    def questions_for_slide(self, slide_number: int) -> list[QuizQuestion]:
        return list(self._by_slide.get(slide_number, ()))

    def all_questions(self) -> list[QuizQuestion]:
        return list(self._questions)

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    def question(self, question_id: str) -> QuizQuestion | None:
        return next((q for q in self._questions if q.id == question_id), None)

    def question_index(self, question_id: str) -> int:
        """Position of *question_id* in the bank, or -1."""
        for index, q in enumerate(self._questions):
            if q.id == question_id:
                return index
        return -1

    def slide_for_question(self, question_id: str) -> int:
        question = self.question(question_id)
        return question.slide_number if question else 1


# ── Module-level Singleton ───────────────────────────────────

_store: ContentStore | None = None


def get_content_store() -> ContentStore:
    """Get the singleton content store, built from the bundled dataset."""
    global _store
    if _store is None:
        from config.settings import get_settings

        _store = ContentStore(
            SLIDES_CONTENT,
            SLIDE_CONTEXT,
            QUIZ_QUESTIONS,
            risk_context=RISK_CONTEXT,
            topic=get_settings().presentation_topic,
        )
        logger.info(
            "Initialized ContentStore (%d slides, %d questions)",
            _store.total_slides,
            _store.total_questions,
        )
    return _store


__all__ = ["ContentStore", "SLIDE_NOT_AVAILABLE", "TOTAL_SLIDES", "get_content_store"]
