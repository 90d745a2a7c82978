"""Video caption and audio retrieval through the external downloader.

WHY: Both transcript sources (auto-captions and the raw audio track)
come from the same command-line tool. This package wraps the two
invocations and the URL handling the front ends need.

RULES:
- Every invocation goes through transcript_bot.process.ProcessRunner
- Video ids are validated before any process is started
"""

from transcript_bot.youtube.audio import AudioFallbackFetcher
from transcript_bot.youtube.captions import CaptionFetcher

__all__ = ["AudioFallbackFetcher", "CaptionFetcher"]
