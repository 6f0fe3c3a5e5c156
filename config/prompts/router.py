"""Path resolver system prompt — picks the general canvas route for a turn.

Used only when the presentation is inactive and no request flag already
decided the route.  Two variants:

- **No artifact yet**: ``replyToGeneralInput`` or ``generateArtifact``
- **Artifact present**: ``replyToGeneralInput`` or ``rewriteArtifact``
"""

from __future__ import annotations

ROUTER_PROMPT = """\
You are an assistant tasked with routing the user's query based on their most
recent message. You should look at this message in isolation and determine the
best route for it.

## Routes

{routes}

## Rules

1. Pick exactly ONE route from the list above.
2. If the user is asking a general question, making small talk, or asking about
   something that does not need a document, choose `replyToGeneralInput`.
3. Only choose a document route when the user clearly wants new content written
   or the existing artifact changed.
{artifact_section}
## Recent Messages

{recent_messages}

Return only the route name.
"""

_GENERATE_ROUTE = (
    "- `generateArtifact`: the user wants a new piece of writing or code produced "
    "(an essay, an email, a program, a plan)."
)
_REWRITE_ROUTE = (
    "- `rewriteArtifact`: the user wants the current artifact changed, fixed, "
    "shortened, extended or otherwise rewritten."
)
_REPLY_ROUTE = (
    "- `replyToGeneralInput`: the user is chatting or asking something a plain "
    "reply answers."
)

_ARTIFACT_SECTION = """
## Current Artifact

The user already has an artifact open. Requests that refer to "it", "this" or
the document most likely mean that artifact.
"""


def build_router_prompt(
    has_artifact: bool = False,
    recent_messages: str = "",
) -> str:
    """Build the path-resolver system prompt.

    Args:
        has_artifact: Whether the canvas currently holds an artifact.
        recent_messages: Pre-formatted recent turns (may be empty).

    Returns:
        The system prompt string.
    """
    routes = [_REWRITE_ROUTE if has_artifact else _GENERATE_ROUTE, _REPLY_ROUTE]
    return ROUTER_PROMPT.format(
        routes="\n".join(routes),
        artifact_section=_ARTIFACT_SECTION if has_artifact else "",
        recent_messages=recent_messages or "(none)",
    )
