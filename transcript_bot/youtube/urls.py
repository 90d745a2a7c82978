"""Recognize video URLs and extract video ids.

RULES:
- Hosts accepted: youtube.com, www.youtube.com, youtu.be, www.youtu.be
- A video id is exactly 11 characters of [A-Za-z0-9_-]
- extract_video_id() looks after v=, v/, vi=, vi/, youtu.be/ or yt.be/
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from transcript_bot.errors import InvalidVideoId

_YOUTUBE_DOMAIN_RE = re.compile(r"^(www\.)?youtu(\.be|be\.com)$")
_VIDEO_ID_IN_URL_RE = re.compile(
    r"(?:v=|v/|vi=|vi/|youtu\.be/|yt\.be/)([a-zA-Z0-9_-]{11})"
)
_VIDEO_ID_RE = re.compile(r"[a-zA-Z0-9_-]{11}")

WATCH_URL = "https://www.youtube.com/watch?v={}"


def is_youtube_url(text: str) -> bool:
    try:
        host = urlparse(text.strip()).hostname or ""
    except ValueError:
        return False
    return bool(_YOUTUBE_DOMAIN_RE.match(host))


def find_youtube_url(text: str) -> Optional[str]:
    """First whitespace-separated token in text that is a video URL.

    Chat clients wrap links in angle brackets (``<https://...|label>``);
    those wrappers are stripped before checking.
    """
    for token in text.split():
        candidate = token.strip("<>").split("|", 1)[0]
        if is_youtube_url(candidate):
            return candidate
    return None


def extract_video_id(url: str) -> Optional[str]:
    match = _VIDEO_ID_IN_URL_RE.search(url)
    return match.group(1) if match else None


def validate_video_id(video_id: str) -> str:
    """Return video_id unchanged, or raise InvalidVideoId."""
    if not _VIDEO_ID_RE.fullmatch(video_id or ""):
        raise InvalidVideoId("Invalid video id: {!r}".format(video_id))
    return video_id


def watch_url(video_id: str) -> str:
    return WATCH_URL.format(validate_video_id(video_id))
