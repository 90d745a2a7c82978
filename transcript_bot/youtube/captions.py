"""Download machine-generated captions for a video as raw SRT text.

WHY: Auto-captions are the fast, cheap source of a transcript. They are
fetched with the external downloader, which writes a subtitle file next
to the output path it is given; this module finds that file, reads it,
and removes it.

HOW: CaptionFetcher builds a unique output path in the temp directory,
runs the downloader through a ProcessRunner with the working directory
pinned to that directory, then looks for ``<base name>*.srt``. Every file
the run left behind is removed afterwards, whatever the outcome.

RULES:
- Requests auto-generated captions, original-language track (".*orig"),
  SRT conversion, no video download
- Any ProcessExecutionFailed, a missing subtitle file, or an unreadable
  subtitle file raises SubtitleDownloadFailed with the cause chained
- An invalid video id raises InvalidVideoId before any process starts
- All files of the run are deleted once read or on failure (best-effort)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from transcript_bot.config import (
    FFMPEG_PATH,
    YTDLP_PATH,
    resolve_executable,
    resolve_optional_executable,
)
from transcript_bot.core.tempfiles import delete_file, unique_temp_path
from transcript_bot.errors import ProcessExecutionFailed, SubtitleDownloadFailed
from transcript_bot.process.runner import ProcessRunner, ProcessSpec
from transcript_bot.youtube.urls import validate_video_id, watch_url

logger = logging.getLogger(__name__)

SUBTITLE_EXTENSION = ".srt"


class CaptionFetcher:
    """Fetches raw SRT captions with the external downloader.

    RULES:
    - runner defaults to a ProcessRunner logging to this package's logger
    - ytdlp_path/ffmpeg_path default to the values from config and are
      resolved to absolute paths; ffmpeg_path="" or an ffmpeg missing from
      PATH leaves --ffmpeg-location out
    - temp_dir defaults to the system temp directory
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        ytdlp_path: Optional[str] = None,
        ffmpeg_path: Optional[str] = None,
        temp_dir: Optional[Path] = None,
    ) -> None:
        self._runner = runner or ProcessRunner()
        self._ytdlp_path = resolve_executable(ytdlp_path or YTDLP_PATH)
        self._ffmpeg_path = resolve_optional_executable(
            FFMPEG_PATH if ffmpeg_path is None else ffmpeg_path
        )
        self._temp_dir = temp_dir

    def build_command(self, video_id: str, output_path: Path) -> List[str]:
        command = [self._ytdlp_path]
        if self._ffmpeg_path:
            command += ["--ffmpeg-location", self._ffmpeg_path]
        command += [
            "--write-auto-sub",
            "--sub-lang", ".*orig",
            "--skip-download",
            "--convert-subs", "srt",
            "--sub-format", "srt",
            "-o", str(output_path),
            watch_url(video_id),
        ]
        return command

    def fetch_captions(self, video_id: str) -> str:
        """Download the captions of a video and return the SRT text.

        Blocks until the downloader exits; call it off the event loop.

        Args:
            video_id: 11-character video id.

        Returns:
            Full contents of the first subtitle file in sorted order.
        """
        validate_video_id(video_id)
        output_path = unique_temp_path(prefix="youtube_", directory=self._temp_dir).absolute()
        logger.info("Caption working file: %s", output_path)

        spec = ProcessSpec(
            command=self.build_command(video_id, output_path),
            cwd=output_path.parent,
        )
        try:
            try:
                self._runner.run(spec, show_logs=True)
            except ProcessExecutionFailed as exc:
                raise SubtitleDownloadFailed(
                    "Caption download failed for {}: {}".format(video_id, exc)
                ) from exc

            subtitle_file = find_subtitle_files(output_path)[0]
            logger.debug("Found subtitle file: %s", subtitle_file)
            try:
                return subtitle_file.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise SubtitleDownloadFailed(
                    "Could not read subtitle file {}".format(subtitle_file)
                ) from exc
        finally:
            delete_run_files(output_path)


def _files_for(output_path: Path) -> List[Path]:
    directory = output_path.parent
    try:
        return sorted(
            entry for entry in directory.iterdir()
            if entry.name.startswith(output_path.name)
        )
    except OSError as exc:
        raise SubtitleDownloadFailed(
            "Could not list directory {}".format(directory)
        ) from exc


def find_subtitle_files(output_path: Path) -> List[Path]:
    """Locate the subtitle files the downloader wrote for output_path.

    RULES:
    - Matches files in output_path's directory whose name starts with
      output_path's name and ends with ".srt", in sorted order
    - The ".*orig" language pattern can match several tracks
    - No match raises SubtitleDownloadFailed
    """
    candidates = [
        path for path in _files_for(output_path)
        if path.name.endswith(SUBTITLE_EXTENSION)
    ]
    if not candidates:
        raise SubtitleDownloadFailed("Subtitle file not found.")
    return candidates


def delete_run_files(output_path: Path) -> None:
    """Delete every file one downloader run wrote next to output_path."""
    try:
        paths = _files_for(output_path)
    except SubtitleDownloadFailed as exc:
        logger.warning("Could not clean up after %s: %s", output_path, exc)
        return
    for path in paths:
        delete_file(path)
