"""Shared pytest fixtures for presentation tests.

Provides:
- ``content_store``: The bundled carvedilol content
- ``inactive_state`` / ``active_state``: Presentation states to start from
- ``bus``: Fresh EventBus per test
- ``session``: Empty conversation session

Module-level singletons (conversation store, turn guard, event bus) are
reset around every test so sessions never leak between tests.
"""

from __future__ import annotations

import os

# Agent modules build provider clients at import time; they need a key present.
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("DEEPSEEK_API_KEY", "test-key")
os.environ.setdefault("DASHSCOPE_API_KEY", "test-key")

import pytest

import services.concurrency as concurrency
import services.conversation_store as conversation_store
from models.presentation import PresentationMode, PresentationState
from services.content_store import ContentStore, get_content_store
from services.conversation_store import ConversationSession
from services.event_bus import EventBus, close_event_bus


@pytest.fixture(autouse=True)
def _reset_singletons():
    conversation_store._store = None
    concurrency._turn_guard = None
    concurrency._llm_semaphore = None
    close_event_bus()
    yield
    conversation_store._store = None
    concurrency._turn_guard = None
    concurrency._llm_semaphore = None
    close_event_bus()


@pytest.fixture
def content_store() -> ContentStore:
    return get_content_store()


@pytest.fixture
def inactive_state() -> PresentationState:
    return PresentationState()


@pytest.fixture
def active_state() -> PresentationState:
    """Active presentation on slide 1, nothing pending."""
    return PresentationState(mode=PresentationMode.ACTIVE, current_slide=1)


@pytest.fixture
def bus() -> EventBus:
    """Fresh event bus — isolated per test."""
    return EventBus()


@pytest.fixture
def session() -> ConversationSession:
    return ConversationSession(conversation_id="conv-test-001")
