"""Discord client — the chat surface around the pipeline.

Responsibilities kept here, so the pipeline stays platform-neutral:
  - decide which messages get a reply (mentions and DMs),
  - fetch recent channel history and convert it to ChatMessage,
  - deliver the reply, resolving the {{MYSELF}} placeholder into a picture,
  - the /rocco slash command,
  - tell the playback manager when the bot's voice connection disappears.
"""

from __future__ import annotations

import io
import logging

import discord
from discord import app_commands

from rocco.config import Config
from rocco.images import ImageError, fetch_self_image
from rocco.llm import LLM
from rocco.models import Author, ChatMessage
from rocco.pipeline import SELF_IMAGE_PLACEHOLDER, RoomContext, run_turn
from rocco.playback import DiscordVoiceTransport, VoicePlaybackManager

logger = logging.getLogger(__name__)

IMAGE_FILENAME = "rocco.png"


def to_chat_message(message: discord.Message) -> ChatMessage:
    return ChatMessage(
        id=str(message.id),
        author=Author(
            username=message.author.name,
            display_name=message.author.display_name,
            id=str(message.author.id),
        ),
        text=message.clean_content,
        attachment_sizes=[a.size for a in message.attachments],
        is_bot_author=message.author.bot,
    )


def room_context(message: discord.Message) -> RoomContext:
    """Room id is the guild id (channel id in DMs)."""
    room_id = str(message.guild.id) if message.guild else str(message.channel.id)
    voice = getattr(message.author, "voice", None)
    return RoomContext(
        room_id=room_id,
        requester=message.author,
        voice_channel=voice.channel if voice else None,
    )


class RoccoBot(discord.Client):
    def __init__(
        self,
        config: Config,
        llm: LLM,
        playback: VoicePlaybackManager | None = None,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.voice_states = True
        super().__init__(intents=intents)
        self.config = config
        self.llm = llm
        self.playback = playback or VoicePlaybackManager(
            DiscordVoiceTransport(), config.playlist_dir,
        )
        self.tree = app_commands.CommandTree(self)

    async def setup_hook(self) -> None:
        @self.tree.command(name="rocco", description="Sends a random image of Rocco")
        async def rocco(interaction: discord.Interaction) -> None:
            await interaction.response.defer()
            try:
                data = await fetch_self_image(self.config.self_image_url)
            except ImageError:
                logger.exception("/rocco image fetch failed")
                await interaction.followup.send("I can't find my camera right now!")
                return
            await interaction.followup.send(file=discord.File(io.BytesIO(data), IMAGE_FILENAME))

        await self.tree.sync()

    async def on_ready(self) -> None:
        logger.info("Logged in as %s (%s)", self.user, self.user.id if self.user else "?")

    def should_reply(self, message: discord.Message) -> bool:
        if message.author.bot or self.user is None:
            return False
        if message.guild is None:
            return True
        return self.user in message.mentions

    async def on_message(self, message: discord.Message) -> None:
        if not self.should_reply(message):
            return
        try:
            async with message.channel.typing():
                reply = await self.handle_message(message)
            if reply:
                await self.deliver(message, reply)
        except Exception:
            logger.exception("Turn failed for message %s", message.id)

    async def handle_message(self, message: discord.Message) -> str | None:
        history = [
            to_chat_message(m)
            async for m in message.channel.history(limit=self.config.history_limit)
        ]
        return await run_turn(
            history=history,
            room=room_context(message),
            llm=self.llm,
            playback=self.playback,
            bot_user_id=self.config.bot_client_id or str(self.user.id),
            error_reply=self.config.error_reply,
        )

    async def deliver(self, message: discord.Message, reply: str) -> None:
        if SELF_IMAGE_PLACEHOLDER not in reply:
            await message.reply(reply)
            return
        text = reply.replace(SELF_IMAGE_PLACEHOLDER, "").strip()
        try:
            data = await fetch_self_image(self.config.self_image_url)
        except ImageError:
            logger.exception("Self image fetch failed")
            await message.reply(text or "I can't find my camera right now!")
            return
        await message.reply(text or None, file=discord.File(io.BytesIO(data), IMAGE_FILENAME))

    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        if self.user is None or member.id != self.user.id:
            return
        if before.channel is not None and after.channel is None:
            await self.playback.forget(str(member.guild.id), before.channel)

    async def close(self) -> None:
        await self.playback.shutdown()
        await super().close()
