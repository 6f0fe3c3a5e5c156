"""Multiple-choice panel navigation over the quiz bank.

The panel walks the bank by index and wraps at both ends.  Each move
reports the slide that owns the new question so the controller can keep
the slide deck in step with the panel.
"""

from __future__ import annotations

from models.presentation import PresentationState, QuizProgress, QuizQuestion
from services.content_store import ContentStore


def current_question(state: PresentationState, store: ContentStore) -> QuizQuestion | None:
    questions = store.all_questions()
    if 0 <= state.current_question_index < len(questions):
        return questions[state.current_question_index]
    return None


def go_to_question(
    state: PresentationState,
    index: int,
    store: ContentStore,
) -> tuple[PresentationState, int | None]:
    """Jump to question *index*.

    Returns:
        ``(new_state, slide_number)``; an out-of-range index leaves the
        state unchanged and returns ``None`` for the slide.
    """
    questions = store.all_questions()
    if not 0 <= index < len(questions):
        return state, None
    return (
        state.model_copy(update={"current_question_index": index}),
        questions[index].slide_number,
    )


def next_question(
    state: PresentationState,
    store: ContentStore,
) -> tuple[PresentationState, int | None]:
    total = store.total_questions
    if total == 0:
        return state, None
    return go_to_question(state, (state.current_question_index + 1) % total, store)


def previous_question(
    state: PresentationState,
    store: ContentStore,
) -> tuple[PresentationState, int | None]:
    total = store.total_questions
    if total == 0:
        return state, None
    return go_to_question(state, (state.current_question_index - 1) % total, store)


def go_to_question_by_id(
    state: PresentationState,
    question_id: str,
    store: ContentStore,
) -> tuple[PresentationState, int | None]:
    index = store.question_index(question_id)
    if index < 0:
        return state, None
    return go_to_question(state, index, store)


def align_with_slide(state: PresentationState, store: ContentStore) -> PresentationState:
    """Point the panel at the current slide's first unanswered question.

    Falls back to the slide's first question when all are answered, and
    leaves the index alone on slides without questions.
    """
    questions = store.questions_for_slide(state.current_slide)
    if not questions:
        return state
    target = next((q for q in questions if not state.is_answered(q.id)), questions[0])
    return state.model_copy(update={"current_question_index": store.question_index(target.id)})


def progress(state: PresentationState, store: ContentStore) -> QuizProgress:
    return QuizProgress(
        answered=list(state.answered_question_ids),
        answered_count=len(state.answered_question_ids),
        correct_count=state.correct_count,
        total_questions=store.total_questions,
    )
