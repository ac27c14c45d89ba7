"""Tests for PlaybackStore."""

from pathlib import Path

import pytest

from rocco.playback import PlaybackSession, PlaybackStore


def _session(name: str = "conn") -> PlaybackSession:
    return PlaybackSession(connection=name, playlist_directory=Path("p"), tracks=[])


def test_get_missing():
    assert PlaybackStore().get("g1") is None


def test_create_and_get():
    store = PlaybackStore()
    session = _session()
    store.create("g1", session)
    assert store.get("g1") is session
    assert store.rooms() == ["g1"]


def test_create_twice_rejected():
    store = PlaybackStore()
    store.create("g1", _session())
    with pytest.raises(ValueError, match="already has a playback session"):
        store.create("g1", _session("other"))


def test_remove():
    store = PlaybackStore()
    session = _session()
    store.create("g1", session)
    assert store.remove("g1") is session
    assert store.remove("g1") is None
    assert store.rooms() == []


def test_remove_only_matching_session():
    store = PlaybackStore()
    old, new = _session("old"), _session("new")
    store.create("g1", new)
    assert store.remove("g1", old) is None
    assert store.get("g1") is new
    assert store.remove("g1", new) is new


def test_lock_per_room():
    store = PlaybackStore()
    assert store.lock("g1") is store.lock("g1")
    assert store.lock("g1") is not store.lock("g2")
