"""Typed failures raised by the transcript pipeline and its collaborators.

WHY: The pipeline recovers from exactly one failure kind (no captions for
this video) by switching to the audio path. Every other failure is
terminal. Distinct exception classes make that rule explicit and let the
front ends render a meaningful message.

HOW: A small hierarchy under TranscriptError. Each class carries the
context needed for logging (exit code, command, chunk count) and chains
its underlying cause with ``raise ... from``.

RULES:
- SubtitleDownloadFailed is the only fallback trigger; nothing subclasses it
- ProcessExecutionFailed.exit_code is None when the process never started
- InvalidVideoId is a ValueError so callers validating input catch it early
- ServiceError covers the opaque language/transcription service failures
"""

from __future__ import annotations

from typing import Sequence


class TranscriptError(Exception):
    """Base class for every failure raised by this package."""


class ProcessExecutionFailed(TranscriptError):
    """Raised when an external command exits non-zero or cannot be started.

    RULES:
    - exit_code: the process exit code, or None for a launch failure
    - command: the argument list that was executed
    """

    def __init__(
        self,
        exit_code: int | None,
        command: Sequence[str] = (),
        message: str | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.command = list(command)
        if message is None:
            program = self.command[0] if self.command else "process"
            if exit_code is None:
                message = f"Could not start {program}"
            else:
                message = f"{program} failed. Exit code: {exit_code}"
        super().__init__(message)


class SubtitleDownloadFailed(TranscriptError):
    """Raised when no caption file could be produced for a video.

    Covers both a failing caption tool and a run that completed without
    writing a subtitle file (captions disabled for the video).
    """


class AudioExtractionFailed(TranscriptError):
    """Raised when the audio track could not be extracted."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        self.exit_code = exit_code
        super().__init__(message)


class TranscriptTooLong(TranscriptError):
    """Raised when the transcript splits into more chunks than allowed.

    Raised before any correction request is sent.
    """

    def __init__(self, chunk_count: int, limit: int, chunk_size: int) -> None:
        self.chunk_count = chunk_count
        self.limit = limit
        self.chunk_size = chunk_size
        super().__init__(
            f"Transcript too long. Please try a shorter video. "
            f"({chunk_count} chunks, max {limit} chunks of {chunk_size} characters)"
        )


class ServiceError(TranscriptError):
    """Raised when the language or transcription service fails."""


class InvalidVideoId(TranscriptError, ValueError):
    """Raised for a video id that cannot be passed to the caption tool."""
