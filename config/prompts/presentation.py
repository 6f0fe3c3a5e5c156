"""Presentation prompts — grounded answers about slide content.

The content-question prompt carries every slide (title and body), the
current slide's background details and, for risk questions, the extra
risk-factor context.  The model is told to answer from that material.
"""

from __future__ import annotations

import re

from services.content_store import ContentStore

CONTENT_SYSTEM_PROMPT = """\
You are an AI assistant explaining a medical presentation on {topic} and heart failure.

## Presentation Content

{slides}

## Current Slide

You are currently on Slide {slide_number}: {slide_title}
{slide_body}

Background for this slide:
{slide_details}
{risk_section}
## Instructions

- Answer the user's question with specific reference to the information in the current slide.
- Be precise and direct, citing specific numbers, statistics and facts from the slides when relevant.
- If the question relates to information on other slides, you may reference that as well.
- For statistics, explain their significance in the context of heart failure treatment.
- Keep the answer concise and focused on the question.
- Do NOT end with a question or an invitation to continue; the presenter adds that.
"""

_RISK_QUESTION_RE = re.compile(r"\b(?:risk|risks|prevent|prevention|increase|increasing|rising)\b")


def is_risk_question(question: str) -> bool:
    return _RISK_QUESTION_RE.search(question.lower()) is not None


def _format_slides(store: ContentStore) -> str:
    return "\n\n".join(
        f"Slide {slide.number}: {slide.title}: {slide.body}" for slide in store.slides()
    )


def build_content_question_prompt(
    store: ContentStore,
    slide_number: int,
    question: str,
) -> str:
    """Build the system prompt for a question about *slide_number*.

    Args:
        store: Content source for slides and background.
        slide_number: Current (already clamped) slide.
        question: The user's utterance; decides whether risk context is added.

    Returns:
        The system prompt string.
    """
    context = store.slide_context(slide_number)
    risk_section = ""
    if is_risk_question(question) and store.risk_context:
        risk = store.risk_context
        risk_section = (
            "\n## Risk Factors\n\n"
            f"{risk.get('factors', '')}\n\n"
            f"{risk.get('prevention', '')}\n"
        )

    return CONTENT_SYSTEM_PROMPT.format(
        topic=store.topic.capitalize(),
        slides=_format_slides(store),
        slide_number=slide_number,
        slide_title=context.title if context else "",
        slide_body=store.slide_body(slide_number),
        slide_details=context.details if context else "",
        risk_section=risk_section,
    )


def build_content_question_message(question: str) -> str:
    return f'The user has asked: "{question}"'
