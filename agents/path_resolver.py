"""PathResolver — model-backed choice of a general canvas route.

Runs only after every request flag has been checked and the turn is not a
presentation turn.  The model chooses between a plain reply and the
artifact route that fits the canvas (``generateArtifact`` with no
artifact, ``rewriteArtifact`` with one).  A failed or off-list answer
falls back to the artifact route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal

from pydantic_ai import Agent, RunContext

from agents.provider import create_model
from config.llm_config import LLMConfig
from config.prompts.router import build_router_prompt
from config.settings import get_settings
from models.base import CamelModel
from models.messages import ConversationMessage
from models.routing import RouteName
from services.concurrency import rate_limited_llm_call

logger = logging.getLogger(__name__)

# Light, fast classification at low temperature
ROUTER_LLM_CONFIG = LLMConfig(temperature=0.1)

RECENT_MESSAGE_COUNT = 4

# Signature of a path resolver; resolve_path is the default.
PathResolver = Callable[
    [str, list[ConversationMessage], bool],
    Awaitable[RouteName | None],
]


class PathChoice(CamelModel):
    route: Literal["replyToGeneralInput", "rewriteArtifact", "generateArtifact"]


@dataclass
class RouterDeps:
    has_artifact: bool
    recent_messages: str


_router_agent = Agent(
    model=create_model(get_settings().router_model),
    output_type=PathChoice,
    deps_type=RouterDeps,
    retries=1,
    defer_model_check=True,
)


@_router_agent.system_prompt
def _router_system_prompt(ctx: RunContext[RouterDeps]) -> str:
    return build_router_prompt(
        has_artifact=ctx.deps.has_artifact,
        recent_messages=ctx.deps.recent_messages,
    )


def allowed_routes(has_artifact: bool) -> tuple[RouteName, RouteName]:
    artifact_route = RouteName.REWRITE_ARTIFACT if has_artifact else RouteName.GENERATE_ARTIFACT
    return RouteName.REPLY_TO_GENERAL_INPUT, artifact_route


def format_recent_messages(messages: list[ConversationMessage], n: int = RECENT_MESSAGE_COUNT) -> str:
    lines = []
    for message in messages[-n:]:
        content = message.content.strip()
        if content:
            lines.append(f"{message.role}: {content[:500]}")
    return "\n".join(lines)


async def resolve_path(
    message: str,
    messages: list[ConversationMessage],
    has_artifact: bool = False,
) -> RouteName | None:
    """Ask the router model which general route handles *message*.

    Args:
        message: Latest human utterance.
        messages: Conversation log, for the recent-message window.
        has_artifact: Whether the canvas already holds an artifact.

    Returns:
        The chosen :class:`RouteName`.  ``None`` only when there is
        nothing to route (empty message).
    """
    if not message.strip():
        return None

    reply_route, artifact_route = allowed_routes(has_artifact)
    deps = RouterDeps(
        has_artifact=has_artifact,
        recent_messages=format_recent_messages(messages),
    )
    try:
        result = await rate_limited_llm_call(
            _router_agent.run,
            message,
            deps=deps,
            model_settings=get_settings().model_settings_for(ROUTER_LLM_CONFIG),
        )
    except Exception:
        logger.exception("PathResolver: model call failed, using %s", artifact_route.value)
        return artifact_route

    route = RouteName(result.output.route)
    if route not in (reply_route, artifact_route):
        logger.warning(
            "PathResolver: %s not valid with has_artifact=%s, using %s",
            route.value, has_artifact, artifact_route.value,
        )
        return artifact_route

    logger.info("PathResolver: route=%s has_artifact=%s", route.value, has_artifact)
    return route
