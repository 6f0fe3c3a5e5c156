"""Conversation messages — a tagged union over human and assistant turns.

The ``role`` discriminator is fixed at construction; nothing downstream
inspects message shape to guess what kind of message it is.
"""

from __future__ import annotations

import time
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import Field

from models.base import CamelModel


def generate_message_id() -> str:
    return f"msg-{uuid.uuid4().hex[:16]}"


class PresentationMetadata(CamelModel):
    """Snapshot of presentation fields taken when a reply is composed.

    Snapshots may be stale relative to live state; readers tolerate that.
    """

    presentation_mode: bool = True
    current_slide: int | None = None
    current_slide_content: str | None = None
    show_question: bool = False
    question_id: str | None = None


class HumanMessage(CamelModel):
    role: Literal["human"] = "human"
    id: str = Field(default_factory=generate_message_id)
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: float = Field(default_factory=time.time)


class AssistantMessage(CamelModel):
    role: Literal["assistant"] = "assistant"
    id: str = Field(default_factory=generate_message_id)
    content: str
    metadata: PresentationMetadata | None = None
    turn_seq: int = 0
    revision: int = 0  # bumped by refresh passes so renderers see a new object
    created_at: float = Field(default_factory=time.time)


class UISyncState(CamelModel):
    """Bookkeeping owned by UIStateSync, kept apart from the message payloads."""

    processed_ids: set[str] = Field(default_factory=set)
    refreshed_ids: set[str] = Field(default_factory=set)
    authoring_ids: set[str] = Field(default_factory=set)
    last_processed_slide: int = 0
    latest_turn_seq: int = 0
    processing: bool = False


ConversationMessage = Annotated[
    Union[HumanMessage, AssistantMessage],
    Field(discriminator="role"),
]
