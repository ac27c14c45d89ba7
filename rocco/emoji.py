"""Custom emoji vocabulary and the rewrites between token and mention forms.

The model only ever sees and writes the short ":name:" form. Discord's
native "<:name:id>" syntax is known to this module alone.
"""

import re

from rocco.models import EmojiEntry

EMOJIS: dict[str, EmojiEntry] = {
    "roccomeem": EmojiEntry(
        mention="<:roccomeem:1429492351952486502>",
        description=(
            "This is you looking at the camera in a zoomed in pose. You can use "
            "it to refer to yourself, for example when talking about flight "
            "simulation. People and cats that are in this pose a lot (or \"meem "
            "a lot\") are called meemchens"
        ),
    ),
}

# <:name:id> and animated <a:name:id>
_NATIVE_EMOJI_RE = re.compile(r"<a?:(\w+):(\d+)>")


def to_tokens(text: str) -> str:
    """Rewrite every native emoji mention down to its ":name:" token."""
    return _NATIVE_EMOJI_RE.sub(lambda m: f":{m.group(1)}:", text)


def _token_pattern(names) -> re.Pattern:
    alternatives = "|".join(re.escape(n) for n in names)
    return re.compile(f":({alternatives}):")


def expand_tokens(text: str, vocabulary: dict[str, EmojiEntry]) -> str:
    """Rewrite known ":name:" tokens to their mention form. Unknown ones stay.

    Only vocabulary names are matched, so a colon belonging to some other
    ":word:" never hides a known token next to it.
    """
    if not vocabulary:
        return text
    return _token_pattern(vocabulary).sub(lambda m: vocabulary[m.group(1)].mention, text)


def restore_emojis(text: str, vocabulary: dict[str, EmojiEntry]) -> str:
    """Normalise to tokens first, then expand. Idempotent."""
    return expand_tokens(to_tokens(text), vocabulary)
