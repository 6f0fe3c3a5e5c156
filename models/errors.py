"""Structured error codes returned in API error payloads.

Every HTTP error raised by the API carries a ``detail`` string in the
frozen format::

    {ERROR_CODE}: {human_readable_detail}
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Frozen error codes shared with the canvas frontend."""

    INVALID_REQUEST = "INVALID_REQUEST"
    CONVERSATION_NOT_FOUND = "CONVERSATION_NOT_FOUND"
    QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
    SLIDE_NOT_FOUND = "SLIDE_NOT_FOUND"
    TURN_IN_PROGRESS = "TURN_IN_PROGRESS"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    LLM_PROVIDER_ERROR = "LLM_PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def format_error(code: ErrorCode, detail: str) -> str:
    """Format an error for an HTTP ``detail`` field.

    Returns:
        ``{ERROR_CODE}: {detail}``
    """
    return f"{code.value}: {detail}"
