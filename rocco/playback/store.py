"""Per-room playback state.

One PlaybackSession per room (Discord guild) id, held in memory for the
lifetime of the process. Every mutation of a room's entry happens while that
room's lock is held, so two play/stop requests for the same guild cannot
interleave around a connect or disconnect await point. Rooms never wait on
each other.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlaybackSession(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    connection: Any
    playlist_directory: Path
    tracks: list[Path]
    requester: Any = None
    current_track: Path | None = None
    task: asyncio.Task | None = Field(default=None, repr=False)


class PlaybackStore:
    def __init__(self) -> None:
        self._sessions: dict[str, PlaybackSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, room_id: str) -> asyncio.Lock:
        """The lock serialising play/stop/forget for one room."""
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        return lock

    def get(self, room_id: str) -> PlaybackSession | None:
        return self._sessions.get(room_id)

    def create(self, room_id: str, session: PlaybackSession) -> None:
        """Install a session. The previous one must already be torn down."""
        if room_id in self._sessions:
            raise ValueError(f"Room {room_id} already has a playback session")
        self._sessions[room_id] = session

    def remove(
        self, room_id: str, session: PlaybackSession | None = None
    ) -> PlaybackSession | None:
        """Remove and return the room's session.

        With `session` given, only remove it if it is still the one stored,
        so a finished loop cannot evict the session that replaced it.
        """
        current = self._sessions.get(room_id)
        if current is None or (session is not None and current is not session):
            return None
        return self._sessions.pop(room_id)

    def rooms(self) -> list[str]:
        return list(self._sessions)
