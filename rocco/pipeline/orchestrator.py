"""Agent orchestrator — produces Rocco's reply for one chat turn.

Turn flow:
  1. Normalise the most-recent-first history into chronological turns.
  2. Compose the system prompt (persona + emoji vocabulary + actions block).
  3. Bind the five actions to the room the turn happens in.
  4. Call the model with tool_choice="auto".
  5. Run at most one action: the first tool call. Later calls are dropped.
     Arguments that fail validation fail that action only.
  6. Reduce to a single Reply. An action result replaces the model's prose
     entirely; without one, the prose is the reply.
  7. Post-process (emoji restoration, forced phrase rewrite).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from rocco.emoji import EMOJIS
from rocco.llm import LLM, LLMError
from rocco.models import (
    ActionReply,
    ActionResult,
    AgentResult,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    EmojiEntry,
    Reply,
    TextReply,
)
from rocco.playback import VoicePlaybackManager
from rocco.prompts import compose_system_prompt

from .actions import SEND_TEXT, Action, RoomContext, build_actions
from .normalize import normalize_history
from .postprocess import postprocess

logger = logging.getLogger(__name__)


async def run_turn(
    *,
    history: Sequence[ChatMessage],
    room: RoomContext,
    llm: LLM,
    playback: VoicePlaybackManager,
    bot_user_id: str = "",
    vocabulary: dict[str, EmojiEntry] = EMOJIS,
    error_reply: str = "",
) -> str | None:
    """Return the text to post, or None when there is nothing to say.

    A failed model call is logged and answered with `error_reply` (None when
    it is empty). It never raises out of the turn.
    """
    turns = normalize_history(history)
    system_prompt = compose_system_prompt(vocabulary, bot_user_id, fallback_action=SEND_TEXT)
    actions = build_actions(room, playback)

    request = ChatRequest(
        system_prompt=system_prompt,
        turns=turns,
        tools=[a.spec() for a in actions.values()],
        tool_choice="auto",
    )

    try:
        response = await llm(request)
    except LLMError:
        logger.exception("Model call failed in room %s", room.room_id)
        return error_reply or None

    result = await consume_actions(response, actions)
    text = postprocess(to_reply(result), vocabulary)
    return text or None


# ---------------------------------------------------------------------------
# Action consumption
# ---------------------------------------------------------------------------

async def consume_actions(response: ChatResponse, actions: dict[str, Action]) -> AgentResult:
    """Run the first requested action, if any, and collect its result."""
    results: list[ActionResult] = []
    if not response.tool_calls:
        return AgentResult(raw_text=response.text)

    first, *rest = response.tool_calls
    if rest:
        logger.info(
            "Model requested %d actions; running %r, dropping %s",
            len(response.tool_calls), first.name, [c.name for c in rest],
        )

    action = actions.get(first.name)
    if action is None:
        logger.warning("Model requested unknown action %r — ignored", first.name)
    else:
        try:
            results.append(await action.run(first.arguments))
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", first.name, e)

    return AgentResult(raw_text=response.text, action_results=results)


def to_reply(result: AgentResult) -> Reply:
    if result.action_results:
        return ActionReply(message=result.action_results[0].message)
    return TextReply(text=result.raw_text)
