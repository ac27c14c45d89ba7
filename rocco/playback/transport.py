"""Real-time audio transport — how the playback manager talks to voice.

The manager only needs four operations:

    connect(channel)          → connection handle
    play(connection, path)    → completes when the track has finished
    destroy(connection)       → tear the connection down
    is_connected(connection)  → whether the connection is still up

DiscordVoiceTransport implements them on top of discord.py voice clients.
Tests substitute an in-memory transport.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Protocol

import discord

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when connecting or streaming to a voice channel fails."""


class VoiceTransport(Protocol):
    async def connect(self, channel: Any) -> Any: ...

    async def play(self, connection: Any, source: Path) -> None: ...

    async def destroy(self, connection: Any) -> None: ...

    def is_connected(self, connection: Any) -> bool: ...


class DiscordVoiceTransport:
    """discord.py voice: FFmpeg-decoded files streamed over a VoiceClient."""

    def __init__(self, ffmpeg_options: str | None = None) -> None:
        self._ffmpeg_options = ffmpeg_options

    async def connect(self, channel: discord.VoiceChannel) -> discord.VoiceClient:
        # A guild has at most one voice client; drop a stale one (e.g. left
        # behind by a previous process) before connecting.
        stale = channel.guild.voice_client
        if stale is not None:
            logger.info("Dropping stale voice client in guild %s", channel.guild.id)
            await stale.disconnect(force=True)
        try:
            return await channel.connect()
        except (discord.ClientException, asyncio.TimeoutError, OSError) as e:
            raise TransportError(f"Cannot connect to voice channel {channel.id}") from e

    async def play(self, connection: discord.VoiceClient, source: Path) -> None:
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[None] = loop.create_future()

        def _resolve(error: Exception | None) -> None:
            if finished.done():
                return
            if error is not None:
                finished.set_exception(TransportError(f"Playback of {source} failed: {error}"))
            else:
                finished.set_result(None)

        # after= runs on the voice player's thread
        def _after(error: Exception | None) -> None:
            loop.call_soon_threadsafe(_resolve, error)

        try:
            audio = discord.FFmpegPCMAudio(str(source), options=self._ffmpeg_options)
            connection.play(audio, after=_after)
        except discord.ClientException as e:
            raise TransportError(f"Cannot play {source}: {e}") from e

        try:
            await finished
        except asyncio.CancelledError:
            if connection.is_playing():
                connection.stop()
            raise

    async def destroy(self, connection: discord.VoiceClient) -> None:
        await connection.disconnect(force=True)

    def is_connected(self, connection: discord.VoiceClient) -> bool:
        return connection.is_connected()
