"""UIStateSync — keeps the rendered message log consistent with presentation state.

Responsibilities:

- one-shot processing of assistant messages, keyed by message id;
- exactly one synthesized ``go to slide N`` turn per slide change, guarded
  by the last processed slide rather than by re-deriving intent;
- dropping replies that belong to a superseded turn (monotonic ``turn_seq``);
- a periodic refresh pass that re-issues each assistant message once as a
  new object, skipping messages still being authored.

All bookkeeping lives in :class:`UISyncState` on the session; message
payloads are never used as flags.
"""

from __future__ import annotations

import asyncio
import logging

from models.messages import AssistantMessage, HumanMessage, PresentationMetadata, UISyncState
from services.content_store import ContentStore
from services.conversation_store import ConversationSession, get_conversation_store

logger = logging.getLogger(__name__)


def slide_change_text(slide_number: int) -> str:
    return f"go to slide {slide_number}"


class UIStateSync:
    """Reconciliation over one session's message log."""

    def __init__(self, session: ConversationSession, content: ContentStore) -> None:
        self.session = session
        self.content = content

    @property
    def state(self) -> UISyncState:
        return self.session.ui

    # ── Per-message processing ───────────────────────────────

    def process_message(self, message: AssistantMessage) -> bool:
        """Run the one-shot pass over an assistant message.

        Fills in missing slide metadata for presentation replies.  Returns
        False when the message id was already processed.
        """
        if message.id in self.state.processed_ids:
            return False
        self.state.processed_ids.add(message.id)

        presentation = self.session.presentation
        if presentation.is_active:
            metadata = message.metadata or PresentationMetadata()
            if not metadata.current_slide_content:
                slide = presentation.current_slide
                metadata = metadata.model_copy(update={
                    "presentation_mode": True,
                    "current_slide": slide,
                    "current_slide_content": self.content.slide_body(slide),
                })
                message = message.model_copy(update={"metadata": metadata})
                self.session.upsert_message(message)
        return True

    # ── Turn bookkeeping ─────────────────────────────────────

    def begin_turn(self, turn_seq: int, reply_id: str) -> None:
        """Record the newest turn and the reply id being authored for it."""
        self.state.latest_turn_seq = max(self.state.latest_turn_seq, turn_seq)
        self.state.authoring_ids.add(reply_id)

    def abandon_turn(self, reply_id: str) -> None:
        self.state.authoring_ids.discard(reply_id)

    def accept_reply(self, message: AssistantMessage) -> bool:
        """Place a finished reply into the log, replacing by id.

        Replies from a turn older than the newest one started are dropped.
        """
        self.state.authoring_ids.discard(message.id)
        if message.turn_seq < self.state.latest_turn_seq:
            logger.warning(
                "UISync: dropping stale reply %s (turn %d < %d) conv=%s",
                message.id,
                message.turn_seq,
                self.state.latest_turn_seq,
                self.session.conversation_id,
            )
            return False
        self.session.upsert_message(message)
        self.process_message(message)
        return True

    # ── Slide-change synthesis ───────────────────────────────

    def begin_slide_change(self, slide_number: int) -> HumanMessage | None:
        """Synthesize the ``go to slide N`` turn for a slide change, at most once.

        Returns None when the presentation is inactive, the slide does not
        exist, the slide was already processed, or another slide change is
        still in flight.
        """
        if not self.session.presentation.is_active:
            return None
        if not self.content.has_slide(slide_number):
            logger.info("UISync: slide change to %d ignored, no such slide", slide_number)
            return None
        if slide_number == self.state.last_processed_slide:
            return None
        if self.state.processing:
            logger.info(
                "UISync: slide change to %d skipped, previous one in flight", slide_number
            )
            return None

        self.state.processing = True
        return HumanMessage(
            content=slide_change_text(slide_number),
            metadata={"presentationMode": True, "presentationSlide": slide_number},
        )

    def finish_slide_change(self, slide_number: int) -> None:
        self.state.last_processed_slide = slide_number
        self.state.processing = False

    def mark_slide_processed(self, slide_number: int) -> None:
        """Record a slide the service moved to itself, so the frame's echo is a repeat."""
        self.state.last_processed_slide = slide_number

    def reset_slide_tracking(self) -> None:
        """Forget the last processed slide (presentation exited)."""
        self.state.last_processed_slide = 0
        self.state.processing = False

    # ── Refresh pass ─────────────────────────────────────────

    def reconcile(self) -> int:
        """Re-issue each not-yet-refreshed assistant message as a new object.

        Order and count of messages never change, and a second pass over
        the same log is a no-op.

        Returns:
            Number of messages refreshed.
        """
        refreshed = 0
        for index, message in enumerate(self.session.messages):
            if not isinstance(message, AssistantMessage):
                continue
            if message.id in self.state.refreshed_ids or message.id in self.state.authoring_ids:
                continue
            self.session.messages[index] = message.model_copy(
                update={"revision": message.revision + 1}
            )
            self.state.refreshed_ids.add(message.id)
            refreshed += 1
        return refreshed


# ── Background Refresh Task ──────────────────────────────────


async def refresh_all_sessions(content: ContentStore) -> int:
    store = get_conversation_store()
    total = 0
    for conversation_id in await store.list_ids():
        session = await store.get(conversation_id)
        if session is None:
            continue
        count = UIStateSync(session, content).reconcile()
        if count:
            await store.save(session)
            total += count
    return total


async def periodic_ui_refresh(content: ContentStore, interval_seconds: float = 5.0) -> None:
    """Background task that runs the refresh pass on a fixed interval.

    Started as an ``asyncio.Task`` in the FastAPI lifespan.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            count = await refresh_all_sessions(content)
            if count:
                logger.debug("UISync: refreshed %d messages", count)
        except Exception:
            logger.exception("UI refresh pass failed")
