"""Track metadata from embedded tag blocks (ID3 and friends) via mutagen."""

import logging
from pathlib import Path

import mutagen

from rocco.models import TrackMetadata

logger = logging.getLogger(__name__)


def _first(tags, key: str) -> str | None:
    values = tags.get(key) if tags is not None else None
    if not values:
        return None
    value = str(values[0]).strip()
    return value or None


def read_track_metadata(path: Path | str) -> TrackMetadata:
    """Read title/artist without decoding audio.

    Missing or unreadable tags give empty metadata, never an error.
    """
    try:
        audio = mutagen.File(path, easy=True)
    except (mutagen.MutagenError, OSError):
        logger.warning("Could not read tags from %s", path, exc_info=True)
        return TrackMetadata()
    if audio is None:
        return TrackMetadata()
    return TrackMetadata(
        title=_first(audio.tags, "title"),
        artist=_first(audio.tags, "artist"),
    )


def describe_track(meta: TrackMetadata) -> str:
    return f"I'm currently playing {meta.title or 'Unknown'} by {meta.artist or 'Unknown'}"
