"""Process configuration read from the environment (and .env).

get_config() returns defaults merged with whatever environment variables are
set. Values are validated by pydantic, so a malformed number fails at startup
rather than halfway through a chat turn.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel

ROOT = Path(__file__).parent.parent

DEFAULT_ERROR_REPLY = "I'm sorry, I don't know what to say. Please try again later."

_CONFIG_DEFAULTS: dict[str, Any] = {
    "discord_token": "",
    "bot_client_id": "",
    "llm_api_key": "",
    "llm_base_url": "https://api.groq.com/openai/v1",
    "llm_model": "openai/gpt-oss-120b",
    "llm_timeout": 120.0,
    "playlist_dir": "assets/playlist",
    "self_image_url": "https://rocco-vercel.vercel.app/cat",
    "history_limit": 20,
    "error_reply": DEFAULT_ERROR_REPLY,
    "log_level": "INFO",
}

# config field → environment variable(s), first one set wins
_ENV_NAMES: dict[str, tuple[str, ...]] = {
    "discord_token": ("DISCORD_TOKEN",),
    "bot_client_id": ("BOT_CLIENT_ID",),
    "llm_api_key": ("LLM_API_KEY", "GROQ_API_KEY"),
    "llm_base_url": ("LLM_BASE_URL",),
    "llm_model": ("LLM_MODEL",),
    "llm_timeout": ("LLM_TIMEOUT",),
    "playlist_dir": ("PLAYLIST_DIR",),
    "self_image_url": ("SELF_IMAGE_URL",),
    "history_limit": ("HISTORY_LIMIT",),
    "error_reply": ("ERROR_REPLY",),
    "log_level": ("LOG_LEVEL",),
}


class Config(BaseModel):
    discord_token: str
    bot_client_id: str
    llm_api_key: str
    llm_base_url: str
    llm_model: str
    llm_timeout: float
    playlist_dir: Path
    self_image_url: str
    history_limit: int
    error_reply: str  # empty string: send nothing when the model call fails
    log_level: str


def get_config(env_file: Path | None = None) -> Config:
    """Read config, returning defaults merged with environment values."""
    load_dotenv(env_file or ROOT / ".env")
    values = dict(_CONFIG_DEFAULTS)
    for field, names in _ENV_NAMES.items():
        for name in names:
            raw = os.getenv(name)
            if raw is not None:
                values[field] = raw
                break
    return Config.model_validate(values)
