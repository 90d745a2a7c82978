"""Transcript pipeline: captions first, audio transcription as fallback.

WHY: A video's transcript can come from two sources. Machine captions
are fast but arrive as a duplicated rolling window without punctuation;
the audio track always exists but needs a slow transcription call. This
module decides which source to use and drives each path to a finished
transcript.

HOW: TranscriptPipeline.run() moves through explicit states:

  FETCHING_CAPTIONS → RECONSTRUCTING → CHUNKING → CORRECTING_CHUNKS → JOINED
  FETCHING_CAPTIONS (SubtitleDownloadFailed) → FETCHING_AUDIO → TRANSCRIBING → DONE
  any state → FAILED (the error propagates)

Blocking downloader runs happen in worker threads via asyncio.to_thread
so the caller's event loop stays free. Correction requests for all chunks
are sent concurrently with asyncio.gather and joined in chunk order.

RULES:
- Only exceptions in FALLBACK_TRIGGERS (SubtitleDownloadFailed) switch to
  the audio path; everything else propagates unchanged
- More than max_chunks chunks raises TranscriptTooLong before any
  correction request is sent
- Correction runs only when the prose looks unpunctuated (ratio above
  punctuation_threshold) and correction is enabled
- One failed correction request fails the whole run; no partial results
- The audio file is deleted once transcribed, whatever the outcome
- No cancellation: abandoning run() does not stop requests in flight
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, List, Optional

from transcript_bot.api.client import OpenAIClient
from transcript_bot.config import MAX_CHUNK_SIZE, MAX_CHUNKS, PUNCTUATION_RATIO_THRESHOLD
from transcript_bot.core.chunker import chunk_text
from transcript_bot.core.prompts import build_punctuation_prompt
from transcript_bot.core.punctuation import alphanumeric_ratio, needs_punctuation
from transcript_bot.core.reconstruct import reconstruct
from transcript_bot.core.tempfiles import delete_file
from transcript_bot.errors import SubtitleDownloadFailed, TranscriptTooLong
from transcript_bot.youtube.audio import AudioFallbackFetcher
from transcript_bot.youtube.captions import CaptionFetcher

logger = logging.getLogger(__name__)

FALLBACK_TRIGGERS = (SubtitleDownloadFailed,)

METHOD_CAPTIONS = "captions"
METHOD_AUDIO = "audio"


class PipelineState(str, enum.Enum):
    """States of one pipeline run.

    RULES:
    - JOINED and DONE are the successful terminal states
    - FAILED is entered right before an error leaves run()
    """

    FETCHING_CAPTIONS = "fetching_captions"
    RECONSTRUCTING = "reconstructing"
    CHUNKING = "chunking"
    CORRECTING_CHUNKS = "correcting_chunks"
    JOINED = "joined"
    FETCHING_AUDIO = "fetching_audio"
    TRANSCRIBING = "transcribing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineConfig:
    """Tunable limits for one pipeline.

    RULES:
    - max_chunk_size: characters per correction request body
    - max_chunks: hard cap on correction requests per video
    - punctuation_threshold: see core.punctuation.needs_punctuation
    - correct: False skips correction entirely
    """

    max_chunk_size: int = MAX_CHUNK_SIZE
    max_chunks: int = MAX_CHUNKS
    punctuation_threshold: float = PUNCTUATION_RATIO_THRESHOLD
    correct: bool = True


@dataclass
class PipelineResult:
    """Outcome of a successful run.

    RULES:
    - method: "captions" (reconstructed, maybe corrected) or "audio"
      (raw transcription); the two are mutually exclusive
    - chunk_count: number of chunks on the caption path, 0 on the audio path
    - corrected: True when the caption text went through correction
    """

    text: str
    method: str
    chunk_count: int = 0
    corrected: bool = False


class TranscriptPipeline:
    """Runs the caption path and, when captions are missing, the audio path.

    HOW: ``service`` is any object with async ``complete(prompt)`` and
    ``transcribe_audio(path)`` methods (normally an entered OpenAIClient).
    The fetchers default to real CaptionFetcher/AudioFallbackFetcher
    instances; tests pass fakes.
    """

    def __init__(
        self,
        service: Any,
        captions: Optional[CaptionFetcher] = None,
        audio: Optional[AudioFallbackFetcher] = None,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self._service = service
        self._captions = captions or CaptionFetcher()
        self._audio = audio or AudioFallbackFetcher()
        self._config = config or PipelineConfig()

    async def run(
        self,
        video_id: str,
        on_state: Callable[[PipelineState], None] | None = None,
    ) -> PipelineResult:
        """Produce a transcript for one video.

        Args:
            video_id: 11-character video id.
            on_state: Optional callback, called with each state entered.

        Returns:
            PipelineResult from the caption path or the audio path.
        """

        def enter(state: PipelineState) -> None:
            logger.info("Video %s: %s", video_id, state.value)
            if on_state:
                on_state(state)

        try:
            enter(PipelineState.FETCHING_CAPTIONS)
            try:
                raw_srt = await asyncio.to_thread(self._captions.fetch_captions, video_id)
            except FALLBACK_TRIGGERS as exc:
                logger.warning(
                    "Error downloading subtitles for %s (%s), now trying to download full audio",
                    video_id, exc,
                )
                return await self._run_audio_path(video_id, enter)
            return await self._run_caption_path(raw_srt, enter)
        except Exception:
            enter(PipelineState.FAILED)
            raise

    async def _run_caption_path(
        self,
        raw_srt: str,
        enter: Callable[[PipelineState], None],
    ) -> PipelineResult:
        config = self._config

        enter(PipelineState.RECONSTRUCTING)
        prose = reconstruct(raw_srt)

        enter(PipelineState.CHUNKING)
        chunks = chunk_text(prose, config.max_chunk_size)
        if len(chunks) > config.max_chunks:
            raise TranscriptTooLong(len(chunks), config.max_chunks, config.max_chunk_size)

        skip = not config.correct
        if skip:
            logger.debug("Punctuation correction disabled")
        elif not needs_punctuation(prose, config.punctuation_threshold):
            logger.debug(
                "Alphanumeric to punctuation ratio is %.1f to 1, no need to add punctuation",
                alphanumeric_ratio(prose),
            )
            skip = True

        if skip:
            enter(PipelineState.JOINED)
            return PipelineResult(text=prose, method=METHOD_CAPTIONS, chunk_count=len(chunks))

        enter(PipelineState.CORRECTING_CHUNKS)
        corrected = await self.correct_chunks(chunks)

        enter(PipelineState.JOINED)
        return PipelineResult(
            text=" ".join(corrected),
            method=METHOD_CAPTIONS,
            chunk_count=len(chunks),
            corrected=True,
        )

    async def correct_chunks(self, chunks: List[str]) -> List[str]:
        """Send one correction request per chunk, concurrently.

        RULES:
        - Results come back in chunk order, not completion order
        - The first failure propagates; other requests are not cancelled
        """
        requests = [self._service.complete(build_punctuation_prompt(chunk)) for chunk in chunks]
        return list(await asyncio.gather(*requests))

    async def _run_audio_path(
        self,
        video_id: str,
        enter: Callable[[PipelineState], None],
    ) -> PipelineResult:
        enter(PipelineState.FETCHING_AUDIO)
        audio_path = await asyncio.to_thread(self._audio.fetch_full_audio, video_id)
        try:
            enter(PipelineState.TRANSCRIBING)
            text = await self._service.transcribe_audio(audio_path)
        finally:
            delete_file(audio_path)

        enter(PipelineState.DONE)
        return PipelineResult(text=text, method=METHOD_AUDIO)


async def fetch_transcript(
    video_id: str,
    config: Optional[PipelineConfig] = None,
    on_state: Callable[[PipelineState], None] | None = None,
) -> PipelineResult:
    """Run a TranscriptPipeline with a fresh OpenAIClient.

    Convenience for front ends that handle one video per call.
    """
    async with OpenAIClient() as client:
        pipeline = TranscriptPipeline(client, config=config)
        return await pipeline.run(video_id, on_state=on_state)
