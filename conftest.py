import asyncio
import os
from pathlib import Path

import pytest

from rocco.config import _ENV_NAMES
from rocco.playback import TransportError, VoicePlaybackManager


class FakeConnection:
    def __init__(self, channel):
        self.channel = channel
        self.destroyed = False
        self.current: asyncio.Future | None = None


class FakeTransport:
    """In-memory voice transport. Each play() waits until finish_track()."""

    def __init__(self):
        self.connections: list[FakeConnection] = []
        self.played: list[str] = []
        self.fail_connect = False
        # called with the connection after destroy(), like a gateway voice event
        self.on_destroy = None

    async def connect(self, channel):
        if self.fail_connect:
            raise TransportError("connection refused")
        conn = FakeConnection(channel)
        self.connections.append(conn)
        return conn

    async def play(self, connection, source: Path):
        if connection.destroyed:
            raise TransportError("not connected")
        self.played.append(source.name)
        connection.current = asyncio.get_running_loop().create_future()
        await connection.current

    async def destroy(self, connection):
        connection.destroyed = True
        if self.on_destroy is not None:
            self.on_destroy(connection)

    def is_connected(self, connection):
        return not connection.destroyed

    def finish_track(self, connection=None, error=None):
        connection = connection or self.connections[-1]
        fut, connection.current = connection.current, None
        if error is not None:
            fut.set_exception(error)
        else:
            fut.set_result(None)


async def _settle():
    """Let background playback tasks run up to their next await."""
    for _ in range(20):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def playlist(tmp_path):
    """Playlist directory with two tracks, a.mp3 and b.mp3."""
    directory = tmp_path / "playlist"
    directory.mkdir()
    for name in ("a.mp3", "b.mp3"):
        (directory / name).write_bytes(b"\x00" * 16)
    return directory


@pytest.fixture
def listing(playlist):
    return os.listdir(playlist)


@pytest.fixture
async def manager(transport, playlist):
    mgr = VoicePlaybackManager(transport, playlist)
    yield mgr
    await mgr.shutdown()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every config variable from the environment for the test."""
    for names in _ENV_NAMES.values():
        for name in names:
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
