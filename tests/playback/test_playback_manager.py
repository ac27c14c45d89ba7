"""Tests for VoicePlaybackManager with an in-memory transport."""

import asyncio
from unittest.mock import patch

import pytest

from rocco.models import TrackMetadata
from rocco.playback import (
    COULD_NOT_START,
    NO_CHANNEL,
    NO_LONGER_SINGING,
    NOT_SINGING,
    NOW_SINGING,
    TransportError,
    VoicePlaybackManager,
)


# ---------------------------------------------------------------------------
# play
# ---------------------------------------------------------------------------

class TestPlay:
    async def test_no_channel(self, manager, transport) -> None:
        assert await manager.play("g1", None, "alice") == NO_CHANNEL
        assert not manager.is_playing("g1")
        assert transport.connections == []

    async def test_starts_first_track(self, manager, transport, listing, settle) -> None:
        assert await manager.play("g1", "voice-1", "alice") == NOW_SINGING
        await settle()
        assert manager.is_playing("g1")
        assert transport.played == [listing[0]]
        session = manager.store.get("g1")
        assert session.requester == "alice"
        assert session.current_track.name == listing[0]

    async def test_loops_back_to_first_track(self, manager, transport, listing, settle) -> None:
        await manager.play("g1", "voice-1")
        await settle()
        transport.finish_track()
        await settle()
        transport.finish_track()
        await settle()
        assert transport.played == [listing[0], listing[1], listing[0]]

    async def test_keeps_directory_listing_order(self, manager, transport, settle) -> None:
        with patch("rocco.playback.manager.os.listdir", return_value=["b.mp3", "a.mp3"]):
            await manager.play("g1", "voice-1")
        await settle()
        transport.finish_track()
        await settle()
        assert transport.played == ["b.mp3", "a.mp3"]

    async def test_rereads_directory_each_time(self, manager, transport, playlist, settle) -> None:
        await manager.play("g1", "voice-1")
        (playlist / "c.mp3").write_bytes(b"\x00")
        await manager.play("g1", "voice-1")
        assert len(manager.store.get("g1").tracks) == 3

    async def test_replaces_existing_session(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-1")
        await settle()
        first = manager.store.get("g1")
        await manager.play("g1", "voice-2")
        await settle()
        assert transport.connections[0].destroyed
        assert not transport.connections[1].destroyed
        assert first.task.done()
        assert manager.store.get("g1").connection.channel == "voice-2"

    async def test_missing_directory(self, transport, tmp_path) -> None:
        manager = VoicePlaybackManager(transport, tmp_path / "nope")
        assert await manager.play("g1", "voice-1") == COULD_NOT_START
        assert not manager.is_playing("g1")
        assert transport.connections == []

    async def test_empty_directory(self, transport, tmp_path) -> None:
        manager = VoicePlaybackManager(transport, tmp_path)
        assert await manager.play("g1", "voice-1") == COULD_NOT_START
        assert not manager.is_playing("g1")

    async def test_connect_failure(self, manager, transport) -> None:
        transport.fail_connect = True
        assert await manager.play("g1", "voice-1") == COULD_NOT_START
        assert not manager.is_playing("g1")

    async def test_transport_error_ends_session(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-1")
        await settle()
        transport.finish_track(error=TransportError("dropped"))
        await settle()
        assert not manager.is_playing("g1")
        assert transport.connections[0].destroyed


# ---------------------------------------------------------------------------
# stop
# ---------------------------------------------------------------------------

class TestStop:
    async def test_never_played(self, manager) -> None:
        assert await manager.stop("g1") == NOT_SINGING

    async def test_stop_twice(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-1")
        await settle()
        session = manager.store.get("g1")
        assert await manager.stop("g1") == NO_LONGER_SINGING
        assert await manager.stop("g1") == NOT_SINGING
        assert transport.connections[0].destroyed
        assert session.task.cancelled()

    async def test_stop_before_loop_started(self, manager, transport) -> None:
        await manager.play("g1", "voice-1")
        assert await manager.stop("g1") == NO_LONGER_SINGING
        assert transport.played == []

    async def test_stop_racing_play(self, manager, transport) -> None:
        results = await asyncio.gather(
            manager.play("g1", "voice-1"),
            manager.stop("g1"),
        )
        assert results == [NOW_SINGING, NO_LONGER_SINGING]
        assert not manager.is_playing("g1")
        assert all(c.destroyed for c in transport.connections)

    async def test_two_plays_racing(self, manager, transport, settle) -> None:
        await asyncio.gather(
            manager.play("g1", "voice-1"),
            manager.play("g1", "voice-2"),
        )
        await settle()
        assert len(transport.connections) == 2
        assert [c.destroyed for c in transport.connections] == [True, False]

    async def test_rooms_are_independent(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-1")
        await manager.play("g2", "voice-2")
        await settle()
        await manager.stop("g1")
        assert not manager.is_playing("g1")
        assert manager.is_playing("g2")

    async def test_forget(self, manager, transport, settle) -> None:
        await manager.forget("g1")
        await manager.play("g1", "voice-1")
        await settle()
        transport.connections[0].destroyed = True
        await manager.forget("g1", "voice-1")
        assert not manager.is_playing("g1")
        assert await manager.stop("g1") == NOT_SINGING

    async def test_forget_keeps_live_connection(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-1")
        await settle()
        await manager.forget("g1", "voice-1")
        assert manager.is_playing("g1")
        assert not transport.connections[0].destroyed

    async def test_forget_other_channel_ignored(self, manager, transport, settle) -> None:
        await manager.play("g1", "voice-2")
        await settle()
        transport.connections[0].destroyed = True
        await manager.forget("g1", "voice-1")
        assert manager.is_playing("g1")

    @pytest.mark.parametrize("second_channel", ["voice-1", "voice-2"])
    async def test_replace_survives_disconnect_report(
        self, manager, transport, listing, settle, second_channel
    ) -> None:
        reports = []
        transport.on_destroy = lambda conn: reports.append(
            asyncio.create_task(manager.forget("g1", conn.channel))
        )
        await manager.play("g1", "voice-1")
        await settle()
        assert await manager.play("g1", second_channel) == NOW_SINGING
        await asyncio.gather(*reports)
        await settle()
        assert len(reports) == 1
        assert manager.is_playing("g1")
        assert [c.destroyed for c in transport.connections] == [True, False]
        transport.finish_track()
        await settle()
        assert transport.played == [listing[0], listing[0], listing[1]]

    async def test_late_report_after_stop_and_replay(self, manager, transport, settle) -> None:
        reports = []
        transport.on_destroy = lambda conn: reports.append(
            asyncio.create_task(manager.forget("g1", conn.channel))
        )
        await manager.play("g1", "voice-1")
        await settle()
        await manager.stop("g1")
        await manager.play("g1", "voice-1")
        await asyncio.gather(*reports)
        await settle()
        assert manager.is_playing("g1")
        assert not transport.connections[1].destroyed

    async def test_shutdown(self, manager, transport) -> None:
        await manager.play("g1", "voice-1")
        await manager.play("g2", "voice-2")
        await manager.shutdown()
        assert manager.store.rooms() == []
        assert all(c.destroyed for c in transport.connections)


# ---------------------------------------------------------------------------
# what_song
# ---------------------------------------------------------------------------

class TestWhatSong:
    async def test_not_playing(self, manager) -> None:
        assert await manager.what_song("g1") == NOT_SINGING

    async def test_reports_tags(self, transport, playlist, settle) -> None:
        manager = VoicePlaybackManager(
            transport, playlist,
            tag_reader=lambda path: TrackMetadata(title=f"Song {path.stem}", artist="Rocco"),
        )
        await manager.play("g1", "voice-1")
        await settle()
        current = manager.store.get("g1").current_track
        reply = await manager.what_song("g1")
        assert reply == f"I'm currently playing Song {current.stem} by Rocco"
        await manager.shutdown()

    async def test_unknown_artist(self, transport, playlist, settle) -> None:
        manager = VoicePlaybackManager(
            transport, playlist, tag_reader=lambda path: TrackMetadata(title="Purr"),
        )
        await manager.play("g1", "voice-1")
        await settle()
        reply = await manager.what_song("g1")
        assert reply == "I'm currently playing Purr by Unknown"
        assert reply.count("Unknown") == 1
        await manager.shutdown()
