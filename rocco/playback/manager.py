"""Voice playback manager — one looping playlist stream per room.

Per room the state is either Idle (no session stored) or Playing. play()
connects to the requester's voice channel and starts a background task that
walks the playlist directory in listing order and wraps around forever.
stop() cancels that task and disconnects. Both run under the room's lock.

Replies are short user-facing sentences; the action layer hands them straight
back to the chat.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rocco.models import TrackMetadata

from .store import PlaybackSession, PlaybackStore
from .tags import describe_track, read_track_metadata
from .transport import TransportError, VoiceTransport

logger = logging.getLogger(__name__)

NO_CHANNEL = "I don't know where to sing!"
NOW_SINGING = "I'm now singing music!"
COULD_NOT_START = "I couldn't start the music!"
NOT_SINGING = "I'm not singing!"
NO_LONGER_SINGING = "I'm no longer singing!"


class PlaybackError(RuntimeError):
    """Raised when the playlist cannot be read or is empty."""


def list_playlist(directory: Path) -> list[Path]:
    """Files in `directory`, in the order the filesystem lists them."""
    try:
        names = os.listdir(directory)
    except OSError as e:
        raise PlaybackError(f"Cannot read playlist directory {directory}") from e
    tracks = [directory / name for name in names if (directory / name).is_file()]
    if not tracks:
        raise PlaybackError(f"Playlist directory {directory} has no tracks")
    return tracks


class VoicePlaybackManager:
    """Owns the PlaybackStore and every room's playback task.

    Args:
        transport:    Voice transport used to connect, stream and disconnect.
        playlist_dir: Directory re-read on every play().
        store:        Session store; a fresh one by default.
        tag_reader:   Metadata reader for what_song(); mutagen by default.
    """

    def __init__(
        self,
        transport: VoiceTransport,
        playlist_dir: Path,
        store: PlaybackStore | None = None,
        tag_reader: Callable[[Path], TrackMetadata] = read_track_metadata,
    ) -> None:
        self._transport = transport
        self._playlist_dir = Path(playlist_dir)
        self._store = store or PlaybackStore()
        self._read_tags = tag_reader

    @property
    def store(self) -> PlaybackStore:
        return self._store

    def is_playing(self, room_id: str) -> bool:
        return self._store.get(room_id) is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def play(self, room_id: str, channel: Any, requester: Any = None) -> str:
        if channel is None:
            return NO_CHANNEL

        async with self._store.lock(room_id):
            await self._teardown(room_id)
            try:
                tracks = await asyncio.to_thread(list_playlist, self._playlist_dir)
                connection = await self._transport.connect(channel)
            except (PlaybackError, TransportError):
                logger.exception("Could not start playback in room %s", room_id)
                return COULD_NOT_START

            session = PlaybackSession(
                connection=connection,
                playlist_directory=self._playlist_dir,
                tracks=tracks,
                requester=requester,
            )
            self._store.create(room_id, session)
            session.task = asyncio.create_task(
                self._run_playlist(room_id, session), name=f"playback-{room_id}",
            )

        logger.info("Playback started in room %s (%d tracks)", room_id, len(tracks))
        return NOW_SINGING

    async def stop(self, room_id: str) -> str:
        async with self._store.lock(room_id):
            if not await self._teardown(room_id):
                return NOT_SINGING
        logger.info("Playback stopped in room %s", room_id)
        return NO_LONGER_SINGING

    async def what_song(self, room_id: str) -> str:
        session = self._store.get(room_id)
        if session is None or session.current_track is None:
            return NOT_SINGING
        meta = await asyncio.to_thread(self._read_tags, session.current_track)
        return describe_track(meta)

    async def forget(self, room_id: str, channel: Any = None) -> None:
        """The bot was reported leaving `channel` in this room.

        Our own teardowns produce these reports too, and they can arrive
        after a newer session has already been installed. A report only
        removes the session when it is about that session's channel and the
        transport says the connection is really gone.
        """
        async with self._store.lock(room_id):
            session = self._store.get(room_id)
            if session is None:
                return
            connected_to = getattr(session.connection, "channel", None)
            if channel is not None and connected_to is not None and connected_to != channel:
                logger.debug("Ignoring voice drop from %s in room %s", channel, room_id)
                return
            if self._transport.is_connected(session.connection):
                logger.debug("Ignoring voice drop in room %s, still connected", room_id)
                return
            self._store.remove(room_id, session)
            await self._dispose(room_id, session)
            logger.info("Voice connection dropped in room %s, session removed", room_id)

    async def shutdown(self) -> None:
        for room_id in self._store.rooms():
            await self.stop(room_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _teardown(self, room_id: str) -> bool:
        """Remove the room's session, cancel its task, disconnect. Lock held."""
        session = self._store.remove(room_id)
        if session is None:
            return False
        await self._dispose(room_id, session)
        return True

    async def _dispose(self, room_id: str, session: PlaybackSession) -> None:
        task = session.task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        try:
            await self._transport.destroy(session.connection)
        except TransportError:
            logger.exception("Error while disconnecting in room %s", room_id)

    async def _run_playlist(self, room_id: str, session: PlaybackSession) -> None:
        try:
            while True:
                for track in session.tracks:
                    session.current_track = track
                    logger.debug("room %s playing %s", room_id, track.name)
                    await self._transport.play(session.connection, track)
        except TransportError:
            logger.exception("Playback failed in room %s", room_id)

        async with self._store.lock(room_id):
            # a replacing play() may already own the room
            if self._store.remove(room_id, session) is not None:
                await self._dispose(room_id, session)
