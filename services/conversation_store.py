"""Conversation session store — server-side memory for presentation conversations.

A session holds the rendered message log, the presentation state, the
UI-sync bookkeeping and the monotonic turn counter.  The abstract
interface keeps the in-memory backend swappable.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    TextPart,
    UserPromptPart,
)

from models.messages import AssistantMessage, ConversationMessage, HumanMessage, UISyncState
from models.presentation import PresentationState

logger = logging.getLogger(__name__)

MAX_MESSAGE_CHARS = 6000

# ── Data Models ──────────────────────────────────────────────


class ConversationSession(BaseModel):
    """Server-side session state for one conversation."""

    conversation_id: str
    messages: list[ConversationMessage] = Field(default_factory=list)
    presentation: PresentationState = Field(default_factory=PresentationState)
    ui: UISyncState = Field(default_factory=UISyncState)
    turn_seq: int = 0
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    def next_turn_seq(self) -> int:
        """Allocate the sequence number for a new turn."""
        self.turn_seq += 1
        self.updated_at = time.time()
        return self.turn_seq

    # ── Message log: append-mostly, replace in place by id ──

    def find_message(self, message_id: str) -> ConversationMessage | None:
        return next((m for m in self.messages if m.id == message_id), None)

    def upsert_message(self, message: ConversationMessage) -> bool:
        """Replace the message with the same id in place, else append.

        Returns:
            True when the message was appended, False when it replaced one.
        """
        for index, existing in enumerate(self.messages):
            if existing.id == message.id:
                self.messages[index] = message
                self.updated_at = time.time()
                return False
        self.messages.append(message)
        self.updated_at = time.time()
        return True

    def recent_messages(self, n: int = 10) -> list[ConversationMessage]:
        return self.messages[-n:]

    def to_pydantic_messages(self, max_turns: int = 20) -> list[ModelMessage]:
        """Convert recent messages into PydanticAI history.

        Excludes the latest human message, which is passed to
        ``agent.run()`` as the prompt itself.
        """
        history = list(self.messages)
        if history and isinstance(history[-1], HumanMessage):
            history = history[:-1]
        recent = history[-max_turns:]

        messages: list[ModelMessage] = []
        for message in recent:
            content = message.content[:MAX_MESSAGE_CHARS]
            if isinstance(message, AssistantMessage):
                messages.append(ModelResponse(parts=[TextPart(content=content)]))
            else:
                messages.append(ModelRequest(parts=[UserPromptPart(content=content)]))
        return messages


# ── Abstract Interface ───────────────────────────────────────


class ConversationStore(ABC):
    """Abstract conversation store — implement for different backends."""

    @abstractmethod
    async def get(self, conversation_id: str) -> ConversationSession | None:
        """Retrieve a session by ID.  Returns None if not found or expired."""
        ...

    @abstractmethod
    async def save(self, session: ConversationSession) -> None:
        """Persist a session (create or update)."""
        ...

    @abstractmethod
    async def delete(self, conversation_id: str) -> None:
        """Remove a session."""
        ...

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """IDs of all live sessions."""
        ...

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Remove all expired sessions.  Returns count removed."""
        ...


# ── In-Memory Implementation ────────────────────────────────


class InMemoryConversationStore(ConversationStore):
    """In-memory store with TTL expiration, for single-process deployments."""

    def __init__(self, ttl_seconds: int = 1800):
        self._store: dict[str, ConversationSession] = {}
        self._ttl = ttl_seconds

    def _is_expired(self, session: ConversationSession) -> bool:
        return (time.time() - session.updated_at) > self._ttl

    async def get(self, conversation_id: str) -> ConversationSession | None:
        session = self._store.get(conversation_id)
        if session is None:
            return None
        if self._is_expired(session):
            del self._store[conversation_id]
            logger.debug("Session expired: %s", conversation_id)
            return None
        return session

    async def save(self, session: ConversationSession) -> None:
        self._store[session.conversation_id] = session

    async def delete(self, conversation_id: str) -> None:
        self._store.pop(conversation_id, None)

    async def list_ids(self) -> list[str]:
        return [cid for cid, s in self._store.items() if not self._is_expired(s)]

    async def cleanup_expired(self) -> int:
        expired = [cid for cid, s in self._store.items() if self._is_expired(s)]
        for cid in expired:
            del self._store[cid]
        if expired:
            logger.info("Cleaned up %d expired conversation sessions", len(expired))
        return len(expired)

    @property
    def size(self) -> int:
        """Number of sessions currently stored (may include expired)."""
        return len(self._store)


# ── Module-level Singleton ───────────────────────────────────

_store: ConversationStore | None = None


def get_conversation_store() -> ConversationStore:
    """Get the singleton conversation store instance."""
    global _store
    if _store is None:
        from config.settings import get_settings

        ttl = get_settings().conversation_ttl
        _store = InMemoryConversationStore(ttl_seconds=ttl)
        logger.info("Initialized InMemoryConversationStore (TTL=%ds)", ttl)
    return _store


def generate_conversation_id() -> str:
    """Generate a new server-side conversation ID."""
    return f"conv-{uuid.uuid4().hex[:12]}"


# ── Background Cleanup Task ──────────────────────────────────


async def periodic_cleanup(interval_seconds: int = 300) -> None:
    """Background task that periodically cleans up expired sessions.

    Started as an ``asyncio.Task`` in the FastAPI lifespan.
    """
    store = get_conversation_store()
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await store.cleanup_expired()
        except Exception:
            logger.exception("Conversation store cleanup failed")
