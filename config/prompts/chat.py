"""Chat system prompt — general replies outside the presentation.

Used for the ``replyToGeneralInput`` route.  The assistant should also
let users know the presentation exists, since starting it is the one
thing the canvas cannot infer from a general question.
"""

from __future__ import annotations

CHAT_SYSTEM_PROMPT = """\
You are a helpful assistant in a writing canvas. Users chat with you, ask
questions, and work on documents with you.

## Your Personality

- Friendly and clear
- Concise: prefer short, helpful answers
- Always respond in the **same language** the user writes in

## Presentation

The canvas includes a short presentation on {topic} and heart failure. If the
user seems interested in {topic}, mention that they can say "start
presentation" to walk through the slides and test their knowledge.

## Constraints

1. NEVER invent document content the user has not shared.
2. If you're not sure about something, say so honestly.
3. Keep responses under 300 words.
"""


def build_chat_prompt(topic: str = "carvedilol", context: str = "") -> str:
    """Build the chat system prompt.

    Args:
        topic: Presentation topic to mention.
        context: Context documents attached to the conversation, if any.

    Returns:
        The system prompt string.
    """
    prompt = CHAT_SYSTEM_PROMPT.format(topic=topic)
    if context:
        prompt += f"\n## Context Documents\n\n{context}\n"
    return prompt
