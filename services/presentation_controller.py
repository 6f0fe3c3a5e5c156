"""PresentationController — the only writer of a session's presentation state.

Routing and the state machine compute the next state; the controller
stores it and tells the rest of the canvas what changed:

- mode flips publish ``presentationModeChange`` (an exit also publishes
  ``exitPresentation`` and clears slide tracking);
- slide moves publish ``goToSlide`` unless the move came out of the slide
  frame itself, and mark the slide as processed so the frame's report of
  it does not run a second turn;
- multiple-choice mode changes publish ``multipleChoiceModeChange``.

Panel operations (multiple-choice mode, question navigation, progress
reset) live here too, because they write the same state.
"""

from __future__ import annotations

import logging

from errors.exceptions import UnknownQuestionError
from models.events import (
    ExitPresentation,
    GoToSlide,
    MultipleChoiceModeChange,
    PresentationEvent,
    PresentationModeChange,
)
from models.presentation import PresentationState, QuizQuestion
from services import quiz
from services.content_store import ContentStore
from services.conversation_store import ConversationSession
from services.event_bus import EventBus, get_event_bus
from services.presentation_machine import reset_quiz_progress
from services.ui_sync import UIStateSync

logger = logging.getLogger(__name__)


class PresentationController:
    """Applies presentation state changes to sessions and publishes events."""

    def __init__(self, store: ContentStore, bus: EventBus | None = None) -> None:
        self.store = store
        self._bus = bus

    @property
    def bus(self) -> EventBus:
        return self._bus or get_event_bus()

    async def apply(
        self,
        session: ConversationSession,
        new_state: PresentationState,
        *,
        from_frame: bool = False,
        align: bool = True,
    ) -> PresentationState:
        """Store *new_state* on *session* and publish what changed.

        Args:
            session: Session to update.
            new_state: State computed by the state machine or a panel operation.
            from_frame: The slide move originated in the slide frame, so no
                ``goToSlide`` is echoed back to it.
            align: In multiple-choice mode, point the panel at the new
                slide's questions when the slide changed.

        Returns:
            The stored state.
        """
        old = session.presentation
        if align and new_state.is_active and new_state.multiple_choice_mode and (
            new_state.current_slide != old.current_slide
        ):
            new_state = quiz.align_with_slide(new_state, self.store)

        session.presentation = new_state
        events = self._diff(session.conversation_id, old, new_state, from_frame=from_frame)

        if old.is_active and not new_state.is_active:
            UIStateSync(session, self.store).reset_slide_tracking()
        elif any(isinstance(event, GoToSlide) for event in events):
            # The frame will report this slide back as slideChanged.
            UIStateSync(session, self.store).mark_slide_processed(new_state.current_slide)

        for event in events:
            await self.bus.publish(event)
        if events:
            logger.info(
                "Controller: conv=%s published %s",
                session.conversation_id,
                ",".join(event.type.value for event in events),
            )
        return new_state

    def _diff(
        self,
        conversation_id: str,
        old: PresentationState,
        new: PresentationState,
        *,
        from_frame: bool,
    ) -> list[PresentationEvent]:
        events: list[PresentationEvent] = []
        if old.is_active != new.is_active:
            events.append(
                PresentationModeChange(conversation_id=conversation_id, is_active=new.is_active)
            )
            if not new.is_active:
                events.append(ExitPresentation(conversation_id=conversation_id))

        if new.is_active and not from_frame and (
            not old.is_active or old.current_slide != new.current_slide
        ):
            events.append(GoToSlide(conversation_id=conversation_id, slide_number=new.current_slide))

        if old.multiple_choice_mode != new.multiple_choice_mode:
            events.append(MultipleChoiceModeChange(
                conversation_id=conversation_id, is_active=new.multiple_choice_mode
            ))
        return events

    # ── Multiple-choice panel ────────────────────────────────

    async def set_multiple_choice_mode(
        self,
        session: ConversationSession,
        enabled: bool | None = None,
    ) -> PresentationState:
        """Enable, disable or (``enabled=None``) toggle multiple-choice mode.

        Enabling points the panel at the current slide's first unanswered
        question.  Only an active presentation can enable it.
        """
        state = session.presentation
        target = (not state.multiple_choice_mode) if enabled is None else enabled
        if target and not state.is_active:
            logger.info(
                "Controller: conv=%s multiple-choice mode ignored, presentation inactive",
                session.conversation_id,
            )
            return state

        new_state = state.model_copy(update={"multiple_choice_mode": target})
        if target:
            new_state = quiz.align_with_slide(new_state, self.store)
        return await self.apply(session, new_state)

    async def navigate_question(
        self,
        session: ConversationSession,
        *,
        direction: str = "next",
        index: int | None = None,
        question_id: str | None = None,
    ) -> tuple[PresentationState, QuizQuestion]:
        """Move the panel to another question and bring the slide along.

        ``question_id`` wins over ``index``, which wins over ``direction``.

        Raises:
            UnknownQuestionError: the id or index does not name a question.
        """
        state = session.presentation
        if question_id is not None:
            moved, slide = quiz.go_to_question_by_id(state, question_id, self.store)
            missing = question_id
        elif index is not None:
            moved, slide = quiz.go_to_question(state, index, self.store)
            missing = str(index)
        elif direction == "previous":
            moved, slide = quiz.previous_question(state, self.store)
            missing = direction
        else:
            moved, slide = quiz.next_question(state, self.store)
            missing = direction

        if slide is None:
            raise UnknownQuestionError(missing)

        if moved.is_active and slide != moved.current_slide:
            moved = moved.model_copy(update={
                "current_slide": slide,
                "awaiting_quiz_answer": False,
                "pending_question_id": None,
            })
        # The panel already points where the user asked; no re-alignment.
        stored = await self.apply(session, moved, align=False)

        question = quiz.current_question(stored, self.store)
        if question is None:
            raise UnknownQuestionError(missing)
        return stored, question

    async def reset_progress(self, session: ConversationSession) -> PresentationState:
        """Forget every recorded answer for the conversation."""
        logger.info("Controller: conv=%s quiz progress reset", session.conversation_id)
        return await self.apply(session, reset_quiz_progress(session.presentation))
