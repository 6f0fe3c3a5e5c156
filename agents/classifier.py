"""IntentClassifier — keyword rules that turn an utterance into an :class:`Intent`.

Classification is ordered and first-match-wins.  Command lexicons run
before the catch-all content-question rule, because in an active
presentation almost any free text is assumed to be a question about the
current slide.

Rule order (active presentation):

1.  start lexicon                       → START (restarts at slide 1)
2.  exit lexicon                        → EXIT
3.  next-slide lexicon                  → NAVIGATE_NEXT (clamped)
4.  previous-slide lexicon              → NAVIGATE_PREV (clamped)
5.  "go to slide N" / "slide N", N in range → NAVIGATE_TO
6.  choice letter or id, question pending → QUIZ_ANSWER
7.  exact short token (< 15 chars)      → yes/sure/ok → QUIZ_REQUEST,
                                          no/skip → DECLINE_CONTINUE,
                                          continue → NAVIGATE_NEXT, or
                                          DECLINE_CONTINUE while a question is pending
8.  question pending                    → DECLINE_CONTINUE on a decline phrase,
                                          QUIZ_REQUEST otherwise
9.  quiz lexicon, < 50 chars, not a wh-question → QUIZ_REQUEST
10. decline lexicon                     → DECLINE_CONTINUE
11. longer than 5 chars                 → CONTENT_QUESTION
12. anything else                       → FALLBACK

An inactive presentation only recognizes START; everything else is
FALLBACK and belongs to the general-purpose agent.
"""

from __future__ import annotations

import logging
import re

from models.presentation import PresentationState, QuizQuestion
from models.routing import Intent, IntentType

logger = logging.getLogger(__name__)

SHORT_RESPONSE_MAX_CHARS = 15
QUIZ_REQUEST_MAX_CHARS = 50
CONTENT_QUESTION_MIN_CHARS = 5

# ---------------------------------------------------------------------------
# Lexicons
# ---------------------------------------------------------------------------

_START_RE = re.compile(
    r"\b(?:start|begin|show)\s+(?:the\s+|a\s+)?(?:[\w-]+\s+)?presentation\b"
    r"|\bstart\s+(?:the\s+)?slides\b"
)
_EXIT_RE = re.compile(r"\b(?:exit|quit|stop|end)\s+(?:the\s+)?presentation\b|\bexit\b")

_NEXT_RE = re.compile(r"\bnext slide\b|\bgo to next\b")
_NEXT_EXACT = frozenset({"next"})

_PREV_RE = re.compile(r"\bprevious slide\b|\bgo back\b|\bprior slide\b")
_PREV_EXACT = frozenset({"previous", "back"})

_GOTO_RE = re.compile(r"\bgo to slide (\d+)\b")
_SLIDE_ONLY_RE = re.compile(r"^slide (\d+)$")

_QUIZ_RE = re.compile(
    r"\b(?:question|questions|quiz|test|knowledge|yes|sure|ok|okay|challenge|please)\b"
)
_WH_QUESTION_RE = re.compile(r"^(?:what|why|when|where|who|which|how)\b(?!\s+about\b)")
# "no" only counts as a decline when it leads the reply ("no thanks"),
# so questions like "is there no benefit in women?" stay content questions.
_DECLINE_RE = re.compile(r"^no\b|\bskip\b|\bnot now\b|\bmove on\b")

_ANSWER_LETTER_RE = re.compile(
    r"^(?:(?:my\s+)?(?:answer|option|choice)(?:\s+is)?\s+)?\(?([a-d])\)?[.)]?$"
)
_CHOICE_ID_RE = re.compile(r"\b(q\d+-[a-d])\b")

# Exact short tokens and what they mean in an active presentation.
_AFFIRMATIVE_TOKENS = frozenset({"yes", "sure", "ok", "okay"})
_NEGATIVE_TOKENS = frozenset({"no", "skip"})
_CONTINUE_TOKENS = frozenset({"continue"})

_TRAILING_PUNCT = " .!?,"


def normalize_utterance(text: str) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    return " ".join(text.lower().split())


def classify_intent(
    message: str,
    state: PresentationState,
    *,
    total_slides: int,
    pending_question: QuizQuestion | None = None,
    topic: str = "",
) -> Intent:
    """Classify *message* against the current presentation state.

    Args:
        message: Raw user utterance; normalized here.
        state: Current presentation state (mode, slide, pending question).
        total_slides: Number of slides, for clamping and range checks.
        pending_question: The question awaiting an answer, if any.
        topic: Presentation topic; ``"start <topic>"`` also starts it.

    Returns:
        The first matching :class:`Intent`.
    """
    text = normalize_utterance(message)
    intent = _classify(text, state, total_slides, pending_question, topic)
    logger.info(
        "Classifier: intent=%s target=%s mode=%s slide=%d awaiting=%s text=%.60s",
        intent.type.value,
        intent.target_slide,
        state.mode.value,
        state.current_slide,
        state.awaiting_quiz_answer,
        text,
    )
    return intent


def _classify(
    text: str,
    state: PresentationState,
    total_slides: int,
    pending_question: QuizQuestion | None,
    topic: str,
) -> Intent:
    if is_start_command(text, topic):
        return Intent(type=IntentType.START, target_slide=1, utterance=text)

    if not state.is_active:
        return Intent(type=IntentType.FALLBACK, utterance=text)

    if _EXIT_RE.search(text):
        return Intent(type=IntentType.EXIT, utterance=text)

    current = state.current_slide
    awaiting = state.awaiting_quiz_answer and pending_question is not None

    target = parse_navigation(text, current, total_slides)
    if target is not None:
        return target.model_copy(update={"utterance": text})

    if awaiting:
        choice_id = _match_choice(text, pending_question)
        if choice_id:
            return Intent(
                type=IntentType.QUIZ_ANSWER,
                question_id=pending_question.id,
                choice_id=choice_id,
                utterance=text,
            )

    token = text.strip(_TRAILING_PUNCT)
    if len(token) < SHORT_RESPONSE_MAX_CHARS:
        if token in _AFFIRMATIVE_TOKENS:
            return Intent(type=IntentType.QUIZ_REQUEST, utterance=text)
        if token in _NEGATIVE_TOKENS:
            return Intent(type=IntentType.DECLINE_CONTINUE, utterance=text)
        if token in _CONTINUE_TOKENS:
            if awaiting:
                return Intent(type=IntentType.DECLINE_CONTINUE, utterance=text)
            return Intent(
                type=IntentType.NAVIGATE_NEXT,
                target_slide=min(current + 1, total_slides),
                utterance=text,
            )

    if awaiting:
        if _DECLINE_RE.search(text):
            return Intent(type=IntentType.DECLINE_CONTINUE, utterance=text)
        return Intent(type=IntentType.QUIZ_REQUEST, utterance=text)

    if (
        len(text) < QUIZ_REQUEST_MAX_CHARS
        and _QUIZ_RE.search(text)
        and not _WH_QUESTION_RE.search(text)
    ):
        return Intent(type=IntentType.QUIZ_REQUEST, utterance=text)

    if _DECLINE_RE.search(text):
        return Intent(type=IntentType.DECLINE_CONTINUE, utterance=text)

    if len(text) > CONTENT_QUESTION_MIN_CHARS:
        return Intent(type=IntentType.CONTENT_QUESTION, utterance=text)

    return Intent(type=IntentType.FALLBACK, utterance=text)


# ---------------------------------------------------------------------------
# Rule helpers
# ---------------------------------------------------------------------------


def is_start_command(text: str, topic: str = "") -> bool:
    """True when *text* (already normalized) asks to start the presentation."""
    if _START_RE.search(text):
        return True
    if topic:
        return re.search(rf"\bstart\s+{re.escape(topic.lower())}\b", text) is not None
    return False


def parse_navigation(text: str, current_slide: int, total_slides: int) -> Intent | None:
    """Parse a navigation command, or return None.

    Next/previous are clamped to ``[1, total_slides]``.  An explicit slide
    number outside that range is not a navigation command at all.
    """
    if _NEXT_RE.search(text) or text in _NEXT_EXACT:
        return Intent(
            type=IntentType.NAVIGATE_NEXT,
            target_slide=min(current_slide + 1, total_slides),
        )

    if _PREV_RE.search(text) or text in _PREV_EXACT:
        return Intent(
            type=IntentType.NAVIGATE_PREV,
            target_slide=max(current_slide - 1, 1),
        )

    match = _GOTO_RE.search(text) or _SLIDE_ONLY_RE.match(text)
    if match:
        number = int(match.group(1))
        if 1 <= number <= total_slides:
            return Intent(type=IntentType.NAVIGATE_TO, target_slide=number)
        logger.info("Classifier: slide %d out of range 1..%d, ignoring", number, total_slides)

    return None


def _match_choice(text: str, question: QuizQuestion) -> str | None:
    """Resolve a reply to a choice id of *question*: letter, choice id or exact text."""
    letter = _ANSWER_LETTER_RE.match(text.strip(" !?,"))
    if letter:
        choice = question.choice_by_letter(letter.group(1))
        return choice.id if choice else None

    for choice_id in _CHOICE_ID_RE.findall(text):
        if question.choice(choice_id) is not None:
            return choice_id

    stripped = text.strip(_TRAILING_PUNCT)
    for choice in question.choices:
        if normalize_utterance(choice.text) == stripped:
            return choice.id
    return None
