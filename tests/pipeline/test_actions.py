"""Tests for the room-bound action set."""

import pytest
from pydantic import ValidationError

from rocco.models import ActionResult
from rocco.pipeline import SELF_IMAGE_PLACEHOLDER, RoomContext, build_actions
from rocco.playback import NO_LONGER_SINGING, NOW_SINGING


@pytest.fixture
def actions(manager):
    room = RoomContext(room_id="g1", requester="uv1k", voice_channel="voice-1")
    return build_actions(room, manager)


async def test_action_names(actions):
    assert list(actions) == [
        "show_self_image", "send_text", "play_music", "stop_music", "what_song",
    ]


async def test_specs(actions):
    for action in actions.values():
        spec = action.spec()
        assert spec.name == action.name
        assert spec.description
        assert spec.parameters["type"] == "object"
    assert actions["show_self_image"].spec().parameters.get("properties", {}) == {}
    assert list(actions["send_text"].spec().parameters["properties"]) == ["message"]


async def test_show_self_image(actions):
    assert await actions["show_self_image"].run("{}") == ActionResult(message=SELF_IMAGE_PLACEHOLDER)


@pytest.mark.parametrize("arguments", ["", "null", "{}"])
async def test_empty_arguments_accepted(actions, arguments):
    result = await actions["show_self_image"].run(arguments)
    assert result.message == SELF_IMAGE_PLACEHOLDER


async def test_send_text(actions):
    result = await actions["send_text"].run('{"message": "Meow"}')
    assert result.message == "Meow"


async def test_send_text_requires_message(actions):
    with pytest.raises(ValidationError):
        await actions["send_text"].run("{}")


async def test_play_then_stop(actions, manager):
    assert (await actions["play_music"].run("{}")).message == NOW_SINGING
    assert manager.store.get("g1").requester == "uv1k"
    assert (await actions["stop_music"].run("{}")).message == NO_LONGER_SINGING
