"""Per-room voice playback.

  store      — room id → PlaybackSession, with one asyncio.Lock per room
  manager    — play / stop / what_song / forget on top of the store
  transport  — VoiceTransport protocol and the discord.py implementation
  tags       — title/artist lookup from embedded tags (mutagen)

A session exists exactly while a room is Playing. Only the manager mutates
the store, and only while holding that room's lock.
"""

from .manager import (  # noqa: F401
    COULD_NOT_START,
    NO_CHANNEL,
    NO_LONGER_SINGING,
    NOT_SINGING,
    NOW_SINGING,
    PlaybackError,
    VoicePlaybackManager,
    list_playlist,
)
from .store import PlaybackSession, PlaybackStore  # noqa: F401
from .tags import describe_track, read_track_metadata  # noqa: F401
from .transport import DiscordVoiceTransport, TransportError, VoiceTransport  # noqa: F401
