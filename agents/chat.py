"""ChatAgent — plain replies for the ``replyToGeneralInput`` route.

Lightweight agent that answers without tools.  Failures propagate to the
caller; unlike presentation replies there is no scripted fallback text
that would make sense here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic_ai import Agent, RunContext
from pydantic_ai.messages import ModelMessage

from agents.provider import create_model
from config.llm_config import LLMConfig
from config.prompts.chat import build_chat_prompt
from config.settings import get_settings
from services.concurrency import rate_limited_llm_call

logger = logging.getLogger(__name__)

# Slightly higher temperature for natural conversation
CHAT_LLM_CONFIG = LLMConfig(temperature=0.7)


@dataclass
class ChatDeps:
    topic: str
    context: str = ""


# Module-level agent, reused across requests
_chat_agent = Agent(
    model=create_model(get_settings().chat_model),
    deps_type=ChatDeps,
    retries=1,
    defer_model_check=True,
)


# Applied on every run, including runs with message history.
@_chat_agent.instructions
def _chat_instructions(ctx: RunContext[ChatDeps]) -> str:
    return build_chat_prompt(topic=ctx.deps.topic, context=ctx.deps.context)


async def generate_response(
    message: str,
    *,
    topic: str = "carvedilol",
    context: str = "",
    message_history: list[ModelMessage] | None = None,
) -> str:
    """Generate a general chat reply.

    Args:
        message: The user's message.
        topic: Presentation topic, mentioned when relevant.
        context: Context documents attached to the conversation.
        message_history: Structured PydanticAI history for multi-turn context.

    Returns:
        A Markdown-formatted text response.
    """
    logger.info(
        "ChatAgent: message=%.60s history_turns=%d",
        message, len(message_history or []),
    )

    result = await rate_limited_llm_call(
        _chat_agent.run,
        message,
        deps=ChatDeps(topic=topic, context=context),
        message_history=message_history or [],
        model_settings=get_settings().model_settings_for(CHAT_LLM_CONFIG),
    )
    response = str(result.output)

    logger.info("ChatAgent: response length=%d", len(response))
    return response
