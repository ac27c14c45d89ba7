"""Core domain models.

The pipeline, the LLM client and the playback manager all exchange these
types. Pydantic is used for validation and serialisation at every data
boundary (chat platform in, model provider in/out).
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


# ---------------------------------------------------------------------------
# Chat history
# ---------------------------------------------------------------------------

class Author(BaseModel):
    username: str
    display_name: str
    id: str


class ChatMessage(BaseModel):
    """A platform-neutral chat history entry."""

    id: str
    author: Author
    text: str  # mention-resolved ("clean") content
    attachment_sizes: list[int] = Field(default_factory=list)
    is_bot_author: bool = False


class UserPayload(BaseModel):
    """Provenance record sent to the model as the content of a user turn."""

    author: Author
    text: str
    attachment_sizes: list[int]
    message_id: str


class ConversationTurn(BaseModel):
    role: Role
    content: str


# ---------------------------------------------------------------------------
# Model provider wire types
# ---------------------------------------------------------------------------

class ToolSpec(BaseModel):
    """An action as advertised to the model."""

    name: str
    description: str
    parameters: dict


class ToolCall(BaseModel):
    id: str = ""
    name: str
    arguments: str = "{}"  # raw JSON, validated by the action before it runs


class ChatRequest(BaseModel):
    system_prompt: str
    turns: list[ConversationTurn]
    tools: list[ToolSpec] = Field(default_factory=list)
    tool_choice: Literal["auto", "none", "required"] = "auto"


class ChatResponse(BaseModel):
    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Actions and replies
# ---------------------------------------------------------------------------

class ActionResult(BaseModel):
    message: str


class AgentResult(BaseModel):
    """Everything a model call produced. Only the first action result counts."""

    raw_text: str = ""
    action_results: list[ActionResult] = Field(default_factory=list)


class TextReply(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class ActionReply(BaseModel):
    kind: Literal["action"] = "action"
    message: str


Reply = Annotated[Union[TextReply, ActionReply], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Emoji and audio metadata
# ---------------------------------------------------------------------------

class EmojiEntry(BaseModel):
    mention: str  # platform-native form, e.g. "<:roccomeem:1429492351952486502>"
    description: str


class TrackMetadata(BaseModel):
    title: str | None = None
    artist: str | None = None
