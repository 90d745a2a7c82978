"""Tests for the transcript pipeline state machine.

WHY: The pipeline owns the two decisions that matter most: when to fall
back to audio, and when to stop before spending correction requests.
These tests cover both paths end to end with fake collaborators.

HOW: Fetchers are MagicMocks (their methods run in a worker thread via
asyncio.to_thread), the service is a MagicMock with AsyncMock methods.
Coroutines run via asyncio.run inside sync tests.

RULES:
- No downloader, no network
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import OVERLAPPING_SRT
from transcript_bot.core.prompts import PUNCTUATION_PROMPT
from transcript_bot.errors import (
    AudioExtractionFailed,
    InvalidVideoId,
    ServiceError,
    SubtitleDownloadFailed,
    TranscriptTooLong,
)
from transcript_bot.pipeline import (
    FALLBACK_TRIGGERS,
    PipelineConfig,
    PipelineResult,
    PipelineState,
    TranscriptPipeline,
    fetch_transcript,
)

VIDEO_ID = "dQw4w9WgXcQ"


def _srt(*blocks) -> str:
    """Build SRT text with one timed block per argument (a list of lines)."""
    out = []
    for i, lines in enumerate(blocks, start=1):
        out.append(str(i))
        out.append("00:00:{:02d},000 --> 00:00:{:02d},000".format(i - 1, i))
        out.extend(lines)
        out.append("")
    return "\n".join(out)


def _chunk_of(prompt: str) -> str:
    assert prompt.startswith(PUNCTUATION_PROMPT)
    return prompt[len(PUNCTUATION_PROMPT):]


async def _echo_upper(prompt: str) -> str:
    return _chunk_of(prompt).upper()


def _service(complete=_echo_upper, transcription="raw audio transcription"):
    service = MagicMock()
    service.complete = AsyncMock(side_effect=complete)
    service.transcribe_audio = AsyncMock(return_value=transcription)
    return service


def _captions(srt=None, error=None):
    fetcher = MagicMock()
    if error is not None:
        fetcher.fetch_captions.side_effect = error
    else:
        fetcher.fetch_captions.return_value = srt
    return fetcher


def _audio(path=None, error=None):
    fetcher = MagicMock()
    if error is not None:
        fetcher.fetch_full_audio.side_effect = error
    else:
        fetcher.fetch_full_audio.return_value = path
    return fetcher


def _run(pipeline: TranscriptPipeline, states=None) -> PipelineResult:
    on_state = states.append if states is not None else None
    return asyncio.run(pipeline.run(VIDEO_ID, on_state=on_state))


# ---------------------------------------------------------------------------
# Tests: caption path
# ---------------------------------------------------------------------------


class TestCaptionPath:
    """Tests for reconstruction, chunking, and correction."""

    def test_overlapping_windows_reconstructed_and_corrected(self):
        service = _service()
        audio = _audio()
        pipeline = TranscriptPipeline(service, captions=_captions(OVERLAPPING_SRT), audio=audio)

        result = _run(pipeline)

        assert result.text == "HELLO WORLD FOO BAR"
        assert result.method == "captions"
        assert result.corrected is True
        assert result.chunk_count == 1
        service.complete.assert_awaited_once()
        audio.fetch_full_audio.assert_not_called()

    def test_states_in_order(self):
        states = []
        _run(TranscriptPipeline(_service(), captions=_captions(OVERLAPPING_SRT)), states)
        assert states == [
            PipelineState.FETCHING_CAPTIONS,
            PipelineState.RECONSTRUCTING,
            PipelineState.CHUNKING,
            PipelineState.CORRECTING_CHUNKS,
            PipelineState.JOINED,
        ]

    def test_chunks_joined_in_order_despite_completion_order(self):
        async def slow_first(prompt):
            chunk = _chunk_of(prompt)
            await asyncio.sleep(0.05 if chunk.startswith("alpha") else 0)
            return "[{}]".format(chunk)

        srt = _srt(["alpha beta"], ["gamma delta"], ["epsilon zeta"])
        service = _service(complete=slow_first)
        config = PipelineConfig(max_chunk_size=12)
        result = _run(TranscriptPipeline(service, captions=_captions(srt), config=config))

        assert result.text == "[alpha beta] [gamma delta] [epsilon zeta]"
        assert result.chunk_count == 3
        assert service.complete.await_count == 3

    def test_too_many_chunks_fails_without_correction(self):
        # 22 nine-letter words: two per 19-character chunk → 11 chunks
        srt = _srt([" ".join(["abcdefghi"] * 22)])
        service = _service()
        config = PipelineConfig(max_chunk_size=19, max_chunks=10)
        states = []

        with pytest.raises(TranscriptTooLong) as exc_info:
            _run(TranscriptPipeline(service, captions=_captions(srt), config=config), states)

        assert exc_info.value.chunk_count == 11
        assert exc_info.value.limit == 10
        service.complete.assert_not_called()
        assert states[-1] is PipelineState.FAILED

    def test_chunk_count_at_limit_is_allowed(self):
        srt = _srt([" ".join(["abcdefghi"] * 20)])
        service = _service()
        config = PipelineConfig(max_chunk_size=19, max_chunks=10)
        result = _run(TranscriptPipeline(service, captions=_captions(srt), config=config))
        assert result.chunk_count == 10
        assert service.complete.await_count == 10

    def test_single_chunk_failure_fails_run(self):
        async def fail_on_second(prompt):
            if _chunk_of(prompt).startswith("gamma"):
                raise ServiceError("service down")
            return "ok"

        srt = _srt(["alpha beta"], ["gamma delta"], ["epsilon zeta"])
        config = PipelineConfig(max_chunk_size=12)
        states = []
        pipeline = TranscriptPipeline(
            _service(complete=fail_on_second), captions=_captions(srt), config=config
        )

        with pytest.raises(ServiceError):
            _run(pipeline, states)
        assert PipelineState.JOINED not in states
        assert states[-1] is PipelineState.FAILED

    def test_punctuated_captions_skip_correction(self):
        srt = _srt(["Hello, world."], ["How are you? Fine, thanks."])
        service = _service()
        states = []

        result = _run(TranscriptPipeline(service, captions=_captions(srt)), states)

        assert result.text == "Hello, world. How are you? Fine, thanks."
        assert result.method == "captions"
        assert result.corrected is False
        service.complete.assert_not_called()
        assert PipelineState.CORRECTING_CHUNKS not in states
        assert states[-1] is PipelineState.JOINED

    def test_correction_disabled(self):
        service = _service()
        config = PipelineConfig(correct=False)
        result = _run(TranscriptPipeline(service, captions=_captions(OVERLAPPING_SRT), config=config))
        assert result.text == "hello world foo bar"
        assert result.corrected is False
        service.complete.assert_not_called()

    def test_zero_threshold_forces_correction(self):
        srt = _srt(["Hello, world."])
        service = _service()
        config = PipelineConfig(punctuation_threshold=0.0)
        result = _run(TranscriptPipeline(service, captions=_captions(srt), config=config))
        assert result.corrected is True
        service.complete.assert_awaited_once()

    def test_empty_captions(self):
        service = _service()
        result = _run(TranscriptPipeline(service, captions=_captions("")))
        assert result == PipelineResult(text="", method="captions", chunk_count=0, corrected=False)
        service.complete.assert_not_called()


# ---------------------------------------------------------------------------
# Tests: audio fallback
# ---------------------------------------------------------------------------


class TestAudioFallback:
    """Tests for the switch to audio transcription."""

    def test_subtitle_failure_triggers_audio_path(self, tmp_path):
        audio_file = tmp_path / "youtube_1-00001.m4a"
        audio_file.write_bytes(b"audio")
        service = _service(transcription="raw words, as spoken")
        audio = _audio(audio_file)
        states = []

        result = _run(
            TranscriptPipeline(
                service,
                captions=_captions(error=SubtitleDownloadFailed("Subtitle file not found.")),
                audio=audio,
            ),
            states,
        )

        assert result == PipelineResult(text="raw words, as spoken", method="audio")
        audio.fetch_full_audio.assert_called_once_with(VIDEO_ID)
        service.transcribe_audio.assert_awaited_once_with(audio_file)
        service.complete.assert_not_called()
        assert states == [
            PipelineState.FETCHING_CAPTIONS,
            PipelineState.FETCHING_AUDIO,
            PipelineState.TRANSCRIBING,
            PipelineState.DONE,
        ]

    def test_audio_file_deleted_after_transcription(self, tmp_path):
        audio_file = tmp_path / "a.m4a"
        audio_file.write_bytes(b"audio")
        pipeline = TranscriptPipeline(
            _service(),
            captions=_captions(error=SubtitleDownloadFailed("none")),
            audio=_audio(audio_file),
        )
        _run(pipeline)
        assert not audio_file.exists()

    def test_audio_file_deleted_when_transcription_fails(self, tmp_path):
        audio_file = tmp_path / "a.m4a"
        audio_file.write_bytes(b"audio")
        service = _service()
        service.transcribe_audio.side_effect = ServiceError("upload failed")
        pipeline = TranscriptPipeline(
            service,
            captions=_captions(error=SubtitleDownloadFailed("none")),
            audio=_audio(audio_file),
        )

        with pytest.raises(ServiceError):
            _run(pipeline)
        assert not audio_file.exists()

    def test_audio_failure_propagates(self):
        states = []
        pipeline = TranscriptPipeline(
            _service(),
            captions=_captions(error=SubtitleDownloadFailed("none")),
            audio=_audio(error=AudioExtractionFailed("no audio", exit_code=1)),
        )
        with pytest.raises(AudioExtractionFailed):
            _run(pipeline, states)
        assert states[-2:] == [PipelineState.FETCHING_AUDIO, PipelineState.FAILED]

    @pytest.mark.parametrize("error", [
        InvalidVideoId("bad id"),
        ServiceError("unexpected"),
        RuntimeError("bug"),
    ])
    def test_other_caption_errors_do_not_fall_back(self, error):
        audio = _audio()
        states = []
        pipeline = TranscriptPipeline(_service(), captions=_captions(error=error), audio=audio)

        with pytest.raises(type(error)):
            _run(pipeline, states)
        audio.fetch_full_audio.assert_not_called()
        assert states == [PipelineState.FETCHING_CAPTIONS, PipelineState.FAILED]

    def test_only_subtitle_failure_is_a_trigger(self):
        assert FALLBACK_TRIGGERS == (SubtitleDownloadFailed,)


# ---------------------------------------------------------------------------
# Tests: fetch_transcript
# ---------------------------------------------------------------------------


class TestFetchTranscript:
    """Tests for the one-shot convenience wrapper."""

    def test_runs_pipeline_with_entered_client(self):
        expected = PipelineResult(text="t", method="captions")
        config = PipelineConfig(max_chunks=3)
        on_state = MagicMock()

        with patch("transcript_bot.pipeline.OpenAIClient") as client_cls, \
                patch("transcript_bot.pipeline.TranscriptPipeline") as pipeline_cls:
            pipeline_cls.return_value.run = AsyncMock(return_value=expected)
            result = asyncio.run(fetch_transcript(VIDEO_ID, config=config, on_state=on_state))

        assert result is expected
        entered = client_cls.return_value.__aenter__.return_value
        pipeline_cls.assert_called_once_with(entered, config=config)
        pipeline_cls.return_value.run.assert_awaited_once_with(VIDEO_ID, on_state=on_state)
        client_cls.return_value.__aexit__.assert_awaited_once()
