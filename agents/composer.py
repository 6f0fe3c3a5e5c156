"""ResponseComposer — assistant text for every presentation action.

Navigation, quiz and transition replies are deterministic templates.
Content questions go to the content agent, grounded in the slide corpus.
Every reply for a slide ends with exactly one call-to-action line, chosen
by slide number; the line is added after generation, so model text that
already contains a known phrasing is left alone.

A failed model call never reaches the user: it becomes a static apology
followed by the same call to action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic_ai import Agent, RunContext

from agents.provider import create_model
from config.llm_config import LLMConfig
from config.prompts.presentation import (
    build_content_question_message,
    build_content_question_prompt,
)
from config.settings import get_settings
from models.messages import AssistantMessage, PresentationMetadata
from models.presentation import PresentationState, QuizQuestion
from models.routing import Action, ActionType
from services.concurrency import rate_limited_llm_call
from services.content_store import ContentStore

logger = logging.getLogger(__name__)

CTA_CONTINUE = "Would you like to continue to the next slide?"
CTA_QUIZ = "Would you like to test your knowledge with a question about this slide?"

# Phrasings that already count as a call to action when found in model text.
KNOWN_CTA_PHRASES: tuple[str, ...] = (
    CTA_CONTINUE.lower(),
    CTA_QUIZ.lower(),
    "would you like to test your knowledge",
    "would you like to continue",
    "shall we continue to the next slide",
    "shall we move to the next slide",
    "ready to move on to the next slide",
)

APOLOGY = (
    "I'm having trouble processing your question right now. "
    "Let's continue with the presentation."
)

SHOW_QUESTION_MARKER = "<!-- SHOW_QUESTION -->"

EXIT_ACKNOWLEDGEMENT = (
    "You've left presentation mode. Say \"start presentation\" any time to pick it up again."
)

# Grounded answers: natural phrasing, but stay close to the slides
CONTENT_LLM_CONFIG = LLMConfig(temperature=0.7)


@dataclass
class ContentDeps:
    store: ContentStore
    slide_number: int
    question: str


_content_agent = Agent(
    model=create_model(get_settings().content_model),
    deps_type=ContentDeps,
    retries=1,
    defer_model_check=True,
)


@_content_agent.system_prompt
def _content_system_prompt(ctx: RunContext[ContentDeps]) -> str:
    return build_content_question_prompt(
        ctx.deps.store, ctx.deps.slide_number, ctx.deps.question
    )


# ---------------------------------------------------------------------------
# Call-to-action handling
# ---------------------------------------------------------------------------


def call_to_action(slide_number: int) -> str:
    """The trailing prompt for *slide_number*."""
    return CTA_CONTINUE if slide_number <= 1 else CTA_QUIZ


def has_call_to_action(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in KNOWN_CTA_PHRASES)


def ensure_call_to_action(text: str, slide_number: int) -> str:
    """Append the slide's call to action unless *text* already has one.

    Idempotent: applying it to its own output returns that output unchanged.
    """
    if has_call_to_action(text):
        return text
    body = text.rstrip()
    cta = call_to_action(slide_number)
    return f"{body}\n\n{cta}" if body else cta


def fallback_reply(slide_number: int) -> str:
    return f"{APOLOGY}\n\n{call_to_action(slide_number)}"


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------


@dataclass
class ComposedReply:
    text: str
    slide: int
    show_question: bool = False
    question_id: str | None = None
    presentation_mode: bool = True


class ResponseComposer:
    """Turns a state-machine :class:`Action` into assistant text."""

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    async def compose(self, action: Action, state: PresentationState) -> ComposedReply:
        slide = self.store.clamp(action.slide or state.current_slide)
        kind = action.type

        if kind == ActionType.NONE:
            return ComposedReply(text=EXIT_ACKNOWLEDGEMENT, slide=slide, presentation_mode=False)
        if kind == ActionType.ANSWER_CONTENT_QUESTION:
            text = await self.answer_content_question(slide, action.utterance)
            return ComposedReply(text=text, slide=slide)
        if kind == ActionType.ASK_QUESTION:
            return self._ask_question(slide, action.question_id)
        if kind == ActionType.EVALUATE_ANSWER:
            return ComposedReply(text=self._evaluate_answer(action, state), slide=slide)

        if kind == ActionType.SHOW_WELCOME:
            text = self.store.slide_body(1)
        elif kind == ActionType.SHOW_SLIDE:
            text = self._slide_block(slide)
        elif kind == ActionType.SHOW_TRANSITION:
            text = (
                f"Let's continue with the presentation. Here's slide {slide}:\n\n"
                f"{self.store.slide_body(slide)}"
            )
        else:
            text = self._slide_block(slide)
        return ComposedReply(text=ensure_call_to_action(text, slide), slide=slide)

    async def answer_content_question(self, slide_number: int, question: str) -> str:
        """Answer *question* grounded in the slides; never raises."""
        deps = ContentDeps(store=self.store, slide_number=slide_number, question=question)
        try:
            result = await rate_limited_llm_call(
                _content_agent.run,
                build_content_question_message(question),
                deps=deps,
                model_settings=get_settings().model_settings_for(CONTENT_LLM_CONFIG),
            )
            answer = str(result.output).strip()
        except Exception:
            logger.exception(
                "Composer: content answer failed for slide %d question=%.60s",
                slide_number, question,
            )
            return fallback_reply(slide_number)

        if not answer:
            logger.warning("Composer: empty content answer for slide %d", slide_number)
            return fallback_reply(slide_number)
        logger.info("Composer: content answer slide=%d length=%d", slide_number, len(answer))
        return ensure_call_to_action(answer, slide_number)

    # ── Templates ────────────────────────────────────────────

    def _slide_block(self, slide: int) -> str:
        title = self.store.slide_title(slide)
        header = f"【Slide {slide}】 {title}".rstrip()
        return f"{header}\n\n{self.store.slide_body(slide)}"

    def _ask_question(self, slide: int, question_id: str | None) -> ComposedReply:
        question = self.store.question(question_id) if question_id else None
        if question is None:
            # Nothing to ask here (e.g. the welcome slide); steer onward instead.
            text = (
                f"There's no quiz question for slide {slide}.\n\n"
                f"{self.store.slide_body(slide)}"
            )
            return ComposedReply(text=ensure_call_to_action(text, slide), slide=slide)

        # The pending question is itself the prompt, so no slide call to action here.
        text = (
            f"Let's test your knowledge on slide {slide}:\n\n"
            f"{format_question(question)}\n\n"
            "Reply with the letter of your answer, or say \"skip\" to move on. "
            f"{SHOW_QUESTION_MARKER}"
        )
        return ComposedReply(text=text, slide=slide, show_question=True, question_id=question.id)

    def _evaluate_answer(self, action: Action, state: PresentationState) -> str:
        question = self.store.question(action.question_id or "")
        slide = self.store.clamp(action.slide or state.current_slide)
        if question is None:
            return ensure_call_to_action(self._slide_block(slide), slide)

        correct = question.correct_choice
        if action.correct:
            verdict = f"Correct! The answer is **{correct.text}**."
        else:
            chosen = question.choice(action.choice_id or "")
            picked = f" You chose \"{chosen.text}\"." if chosen else ""
            verdict = f"Not quite.{picked} The correct answer is **{correct.text}**."

        answered = len(state.answered_question_ids)
        summary = (
            f"You've answered {answered} of {self.store.total_questions} questions "
            f"({state.correct_count} correct)."
        )
        return ensure_call_to_action(f"{verdict}\n\n{summary}", slide)


def format_question(question: QuizQuestion) -> str:
    lines = [f"**{question.text}**", ""]
    for letter, choice in zip("ABCDEFGH", question.choices):
        lines.append(f"{letter}) {choice.text}")
    return "\n".join(lines)


def build_assistant_message(
    reply: ComposedReply,
    store: ContentStore,
    *,
    turn_seq: int,
    message_id: str | None = None,
) -> AssistantMessage:
    """Wrap a reply with a snapshot of the presentation fields."""
    metadata = PresentationMetadata(
        presentation_mode=reply.presentation_mode,
        current_slide=reply.slide,
        current_slide_content=store.slide_body(reply.slide),
        show_question=reply.show_question,
        question_id=reply.question_id,
    )
    kwargs = {"id": message_id} if message_id else {}
    return AssistantMessage(content=reply.text, metadata=metadata, turn_seq=turn_seq, **kwargs)
