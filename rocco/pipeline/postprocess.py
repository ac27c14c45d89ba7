"""Final rewrites applied to every reply before it is posted."""

from __future__ import annotations

import re

from rocco.emoji import restore_emojis
from rocco.models import ActionReply, EmojiEntry, Reply

CORRECTIVE_PHRASE = "I'M NOT A DAWG"

# "I'm a dog", "Im a d0ggo.", "i am a dog!" ... group 1 is trailing punctuation
_DOG_RE = re.compile(r"\b(?:i['’]?m|i am)\s+a\s+d[o0]g\w*\b([.!?])?", re.IGNORECASE)


def rewrite_dog(text: str) -> str:
    return _DOG_RE.sub(lambda m: CORRECTIVE_PHRASE + (m.group(1) or ""), text)


def reply_text(reply: Reply) -> str:
    if isinstance(reply, ActionReply):
        return reply.message
    return reply.text


def postprocess(reply: Reply | str, vocabulary: dict[str, EmojiEntry]) -> str:
    """Emoji restoration, then the forced phrase rewrite. Nothing else."""
    text = reply if isinstance(reply, str) else reply_text(reply)
    return rewrite_dog(restore_emojis(text, vocabulary))
