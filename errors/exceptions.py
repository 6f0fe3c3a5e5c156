"""Domain-specific exceptions for the presentation service.

These exceptions let the routing core and the API layer distinguish
programming-contract violations from caller mistakes and respond with
the appropriate HTTP status.
"""

from __future__ import annotations


class PresentationError(Exception):
    """Base class for presentation-core errors."""


class RoutingError(PresentationError):
    """No downstream handler could be chosen for a turn.

    The routing checks end in an exhaustive fallback, so reaching this is
    a logic gap, not a user-facing condition.
    """

    def __init__(self, message: str = "Route not found", conversation_id: str = "") -> None:
        self.conversation_id = conversation_id
        super().__init__(message)


class TurnInProgressError(PresentationError):
    """A new turn arrived while the previous one for the same conversation is in flight."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation '{conversation_id}' already has a turn in flight")


class UnknownQuestionError(PresentationError):
    """A quiz operation referenced a question id that is not in the bank."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(f"Question '{question_id}' not found")


class UnknownChoiceError(PresentationError):
    """The choice id does not belong to the referenced question."""

    def __init__(self, question_id: str, choice_id: str) -> None:
        self.question_id = question_id
        self.choice_id = choice_id
        super().__init__(
            f"Choice '{choice_id}' is not an option of question '{question_id}'"
        )


class ConversationNotFoundError(PresentationError):
    """A conversation-scoped operation named a conversation with no session."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation '{conversation_id}' not found")
