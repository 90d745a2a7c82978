"""Configuration constants, executable lookup, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Size limits, service defaults, and tool paths are
plain module-level values, not buried in the pipeline or the clients.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read with os.getenv. load_api_key() provides a
clear error when the key is missing, resolve_executable() turns a tool
name into an absolute path and resolve_optional_executable() does the same
for tools that may be missing.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Tool paths must be absolute before they reach the process runner,
  because child processes run with an empty environment (no PATH)
- MAX_CHUNK_SIZE leaves 1024 characters of headroom for the prompt text
"""

from __future__ import annotations

import os
import shutil

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Language service limits
# ---------------------------------------------------------------------------

PROMPT_SIZE_LIMIT = 4096
"""Maximum characters accepted by OpenAIClient.complete()."""

MAX_CHUNK_SIZE = PROMPT_SIZE_LIMIT - 1024
MAX_CHUNKS = 10
MAX_AUDIO_BYTES = 25 * 1024 * 1024

PUNCTUATION_RATIO_THRESHOLD = float(os.getenv("PUNCTUATION_RATIO_THRESHOLD", "10"))
"""Alphanumeric-to-punctuation ratio above which captions get corrected."""

HTTP_TIMEOUT_S = 120.0  # audio uploads of up to 25 MiB take a while

# ---------------------------------------------------------------------------
# Service configuration defaults
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_COMPLETION_MODEL = os.getenv("OPENAI_COMPLETION_MODEL", "gpt-4o-mini")
OPENAI_TRANSCRIPTION_MODEL = os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1")

# ---------------------------------------------------------------------------
# External tools
# ---------------------------------------------------------------------------

YTDLP_PATH = os.getenv("YTDLP_PATH", "yt-dlp")
FFMPEG_PATH = os.getenv("FFMPEG_PATH", "ffmpeg")

# ---------------------------------------------------------------------------
# Slack front end
# ---------------------------------------------------------------------------

SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN", "")
SLACK_APP_TOKEN = os.getenv("SLACK_APP_TOKEN", "")
SLACK_CHANNEL_ID = os.getenv("SLACK_CHANNEL_ID", "")


def load_api_key() -> str:
    """Load the OpenAI API key from the environment.

    WHY: The key is required for every completion and transcription call.
    Loading it from the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Add OPENAI_API_KEY to the .env file in the app folder."
        )
    return key


def resolve_executable(name_or_path: str) -> str:
    """Return an absolute path for a tool name or path.

    HOW: Looks the name up on the parent's PATH with shutil.which. Falls
    back to the value as given so the launch failure surfaces from the
    process runner with the original name in the message.
    """
    found = shutil.which(name_or_path)
    return os.path.abspath(found) if found else name_or_path


def resolve_optional_executable(name_or_path: str) -> str:
    """Return an absolute path for an optional tool, or "" when absent.

    RULES:
    - A value with a directory part is an explicit path and is kept
    - A bare name is looked up on the parent's PATH
    - An empty value or a name not on PATH gives ""
    """
    if not name_or_path:
        return ""
    if os.path.dirname(name_or_path):
        return os.path.abspath(name_or_path)
    found = shutil.which(name_or_path)
    return os.path.abspath(found) if found else ""
