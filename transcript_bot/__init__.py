"""Transcript Bot: readable transcripts for online videos.

WHY: Automatic captions are a rolling window of overlapping lines with
no punctuation. This package turns them back into prose, has a language
service add punctuation, and falls back to transcribing the audio track
when a video has no captions.

HOW: Four layers: downloader (external tool behind a process runner),
core text processing (reconstruct, chunk, punctuation heuristic),
service client, and front ends (CLI and Slack bot) on top of one
pipeline.

RULES:
- Front ends only talk to transcript_bot.pipeline and the service client
- Core text processing is pure and independently testable
"""

__version__ = "0.1.0"
