"""The fixed set of actions the model may invoke, bound to one chat room.

Each action has a trigger description (what the model reads), a pydantic
input model (validated before the handler runs) and an async handler that
returns an ActionResult. Handlers close over the RoomContext they were built
for, so play/stop/what_song reach the right guild's playback session.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from rocco.models import ActionResult, ToolSpec
from rocco.playback import VoicePlaybackManager

# Resolved into an actual picture by the chat layer.
SELF_IMAGE_PLACEHOLDER = "{{MYSELF}}"

SHOW_SELF_IMAGE = "show_self_image"
SEND_TEXT = "send_text"
PLAY_MUSIC = "play_music"
STOP_MUSIC = "stop_music"
WHAT_SONG = "what_song"


class RoomContext(BaseModel):
    """Where a turn is happening and who asked."""

    room_id: str
    requester: Any = None
    voice_channel: Any = None  # requester's current voice channel, if any


class NoInput(BaseModel):
    pass


class SendTextInput(BaseModel):
    message: str


class Action(BaseModel):
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[ActionResult]]

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.input_model.model_json_schema(),
        )

    async def run(self, arguments: str) -> ActionResult:
        """Validate raw JSON arguments, then call the handler.

        Raises pydantic.ValidationError when the arguments do not match.
        """
        if not arguments or arguments.strip() == "null":
            arguments = "{}"
        inputs = self.input_model.model_validate_json(arguments)
        return await self.handler(inputs)


def build_actions(room: RoomContext, playback: VoicePlaybackManager) -> dict[str, Action]:
    async def show_self_image(_: NoInput) -> ActionResult:
        return ActionResult(message=SELF_IMAGE_PLACEHOLDER)

    async def send_text(inputs: SendTextInput) -> ActionResult:
        return ActionResult(message=inputs.message)

    async def play_music(_: NoInput) -> ActionResult:
        message = await playback.play(room.room_id, room.voice_channel, room.requester)
        return ActionResult(message=message)

    async def stop_music(_: NoInput) -> ActionResult:
        return ActionResult(message=await playback.stop(room.room_id))

    async def what_song(_: NoInput) -> ActionResult:
        return ActionResult(message=await playback.what_song(room.room_id))

    actions = [
        Action(
            name=SHOW_SELF_IMAGE,
            description=(
                "Used to send a picture of yourself to the chat. Only use this when the "
                "most recent message is asking for your appearance (e.g. \"what do you "
                "look like?\" or \"send me a picture of yourself\")."
            ),
            input_model=NoInput,
            handler=show_self_image,
        ),
        Action(
            name=SEND_TEXT,
            description=(
                "Sends a message to the chat. Use this tool during conversations. Use "
                "this tool if you don't have any other tools available. ONLY include "
                "the message contents!"
            ),
            input_model=SendTextInput,
            handler=send_text,
        ),
        Action(
            name=PLAY_MUSIC,
            description="Plays music. Use this tool when asked to play music or sing.",
            input_model=NoInput,
            handler=play_music,
        ),
        Action(
            name=STOP_MUSIC,
            description=(
                "Stops playing music from the 24h stream. Use this tool when asked to "
                "stop playing music or singing."
            ),
            input_model=NoInput,
            handler=stop_music,
        ),
        Action(
            name=WHAT_SONG,
            description=(
                "Tells you what song Rocco is currently playing. Use this tool when "
                "asked to tell you what song Rocco is playing."
            ),
            input_model=NoInput,
            handler=what_song,
        ),
    ]
    return {a.name: a for a in actions}
