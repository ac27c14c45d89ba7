"""Single-reply chat pipeline.

Executes one turn for one triggering message:
  1. normalize    — history (newest first) → chronological ConversationTurns.
  2. orchestrator — system prompt + room-bound actions → one model call.
  3. actions      — at most one action runs; its message replaces the prose.
  4. postprocess  — emoji tokens back to mentions, forced phrase rewrite.

Actions (model-facing names):
  show_self_image — reply with the {{MYSELF}} placeholder
  send_text       — reply with the given text (the fallback)
  play_music      — start the looping playlist in the requester's voice channel
  stop_music      — stop it
  what_song       — report the current track's title and artist
"""

from .actions import (  # noqa: F401
    SELF_IMAGE_PLACEHOLDER,
    Action,
    RoomContext,
    build_actions,
)
from .normalize import normalize_history  # noqa: F401
from .orchestrator import consume_actions, run_turn, to_reply  # noqa: F401
from .postprocess import CORRECTIVE_PHRASE, postprocess, rewrite_dog  # noqa: F401
