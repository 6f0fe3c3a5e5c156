"""Concurrency controls — per-conversation turn guard and LLM call limiting.

A conversation processes one turn at a time.  The presentation state is
not safe for concurrent writers, so a second turn that arrives while one
is in flight is rejected instead of queued.

Outbound model calls are capped per worker by a lazily created
semaphore.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Coroutine

from errors.exceptions import TurnInProgressError

logger = logging.getLogger(__name__)

# ── Global LLM semaphore ─────────────────────────────────────

_llm_semaphore: asyncio.Semaphore | None = None


def _get_semaphore() -> asyncio.Semaphore:
    """Lazy-init to ensure semaphore is bound to the running event loop."""
    global _llm_semaphore
    if _llm_semaphore is None:
        from config.settings import get_settings

        limit = get_settings().max_concurrent_llm
        _llm_semaphore = asyncio.Semaphore(limit)
        logger.info("LLM concurrency semaphore initialized (max=%d)", limit)
    return _llm_semaphore


async def rate_limited_llm_call(
    func: Callable[..., Coroutine[Any, Any, Any]],
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Execute an async LLM function with concurrency limiting.

    Usage::

        result = await rate_limited_llm_call(agent.run, prompt, model_settings=...)
    """
    async with _get_semaphore():
        return await func(*args, **kwargs)


# ── Per-conversation turn guard ──────────────────────────────


class TurnGuard:
    """Tracks which conversations have a turn in flight."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_busy(self, conversation_id: str) -> bool:
        return conversation_id in self._in_flight

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        """Hold the conversation for one turn.

        Raises:
            TurnInProgressError: another turn for *conversation_id* is running.
        """
        if conversation_id in self._in_flight:
            logger.warning("Turn rejected, conversation busy: %s", conversation_id)
            raise TurnInProgressError(conversation_id)
        self._in_flight.add(conversation_id)
        try:
            yield
        finally:
            self._in_flight.discard(conversation_id)


_turn_guard: TurnGuard | None = None


def get_turn_guard() -> TurnGuard:
    global _turn_guard
    if _turn_guard is None:
        _turn_guard = TurnGuard()
    return _turn_guard
