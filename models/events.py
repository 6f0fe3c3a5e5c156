"""Typed payloads for the presentation event bus.

Events are fire-and-forget notifications between independently mounted
parts of the canvas.  Every payload names the conversation it belongs to.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from models.base import CamelModel


class EventType(str, Enum):
    PRESENTATION_MODE_CHANGE = "presentationModeChange"
    EXIT_PRESENTATION = "exitPresentation"
    MULTIPLE_CHOICE_MODE_CHANGE = "multipleChoiceModeChange"
    SLIDE_CHANGED = "slideChanged"  # posted out of the slide frame
    GO_TO_SLIDE = "goToSlide"  # posted into the slide frame


class PresentationEvent(CamelModel):
    type: EventType
    conversation_id: str


class PresentationModeChange(PresentationEvent):
    type: EventType = EventType.PRESENTATION_MODE_CHANGE
    is_active: bool


class ExitPresentation(PresentationEvent):
    type: EventType = EventType.EXIT_PRESENTATION


class MultipleChoiceModeChange(PresentationEvent):
    type: EventType = EventType.MULTIPLE_CHOICE_MODE_CHANGE
    is_active: bool


class SlideChanged(PresentationEvent):
    type: EventType = EventType.SLIDE_CHANGED
    slide_number: int = Field(ge=1)


class GoToSlide(PresentationEvent):
    type: EventType = EventType.GO_TO_SLIDE
    slide_number: int = Field(ge=1)
