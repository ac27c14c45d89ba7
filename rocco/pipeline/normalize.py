"""Chat history → model turns."""

from collections.abc import Sequence

from rocco.models import ChatMessage, ConversationTurn, UserPayload


def to_turn(message: ChatMessage) -> ConversationTurn:
    """Map one history entry to a turn.

    Bot-authored messages become assistant turns with their rendered text.
    Everything else becomes a user turn whose content is a JSON provenance
    record, so the model can tell who said what without being handed raw
    platform markup as instructions.
    """
    if message.is_bot_author:
        return ConversationTurn(role="assistant", content=message.text)
    payload = UserPayload(
        author=message.author,
        text=message.text,
        attachment_sizes=message.attachment_sizes,
        message_id=message.id,
    )
    return ConversationTurn(role="user", content=payload.model_dump_json())


def normalize_history(messages: Sequence[ChatMessage]) -> list[ConversationTurn]:
    """Convert most-recent-first history into chronological turns.

    This is the only place the history is reversed. The input is not mutated.
    """
    return [to_turn(m) for m in reversed(messages)]
