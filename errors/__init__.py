"""Custom exception hierarchy for the presentation service."""

from errors.exceptions import (
    ConversationNotFoundError,
    PresentationError,
    RoutingError,
    TurnInProgressError,
    UnknownChoiceError,
    UnknownQuestionError,
)

__all__ = [
    "ConversationNotFoundError",
    "PresentationError",
    "RoutingError",
    "TurnInProgressError",
    "UnknownChoiceError",
    "UnknownQuestionError",
]
