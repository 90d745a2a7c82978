"""Extract a video's full audio track when no captions exist.

WHY: Videos without machine captions can still be transcribed by
sending their audio to the transcription service. This is the slow
path and only runs after the caption download has failed.

HOW: AudioFallbackFetcher runs the downloader with best-audio selection
and re-encoding to m4a, writing to a unique path in the temp directory.

RULES:
- Non-zero exit raises AudioExtractionFailed with the exit code
- A run that exits 0 but leaves no file also raises AudioExtractionFailed
- No retries and no further fallback
- The caller owns the returned file and must delete it
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
from transcript_bot.core.tempfiles import unique_temp_path
from transcript_bot.errors import AudioExtractionFailed, ProcessExecutionFailed
from transcript_bot.process.runner import ProcessRunner, ProcessSpec
from transcript_bot.youtube.urls import validate_video_id, watch_url

logger = logging.getLogger(__name__)

AUDIO_FORMAT = "m4a"


class AudioFallbackFetcher:
    """Downloads and transcodes the full audio track of a video."""

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
        command = [
            self._ytdlp_path,
            "-f", "ba",
            "-x",
            "--audio-format", AUDIO_FORMAT,
        ]
        if self._ffmpeg_path:
            command += ["--ffmpeg-location", self._ffmpeg_path]
        command += ["-o", str(output_path), watch_url(video_id)]
        return command

    def fetch_full_audio(self, video_id: str) -> Path:
        """Download the audio track and return the path of the audio file.

        Blocks until the downloader exits.
        """
        validate_video_id(video_id)
        output_path = unique_temp_path(
            prefix="youtube_",
            suffix="." + AUDIO_FORMAT,
            directory=self._temp_dir,
        ).absolute()
        logger.info("Audio output path: %s", output_path)

        spec = ProcessSpec(
            command=self.build_command(video_id, output_path),
            cwd=output_path.parent,
        )
        try:
            self._runner.run(spec, show_logs=True)
        except ProcessExecutionFailed as exc:
            raise AudioExtractionFailed(
                "Audio extraction failed for {}: {}".format(video_id, exc),
                exit_code=exc.exit_code,
            ) from exc

        if not output_path.is_file():
            raise AudioExtractionFailed(
                "Audio extraction produced no file at {}".format(output_path),
                exit_code=0,
            )
        return output_path
