"""Command-line interface for the transcript pipeline.

WHY: The pipeline is useful outside chat too: fetch a video's transcript
from the terminal, pipe it into a file or another tool, and tune the
correction limits while doing so.

HOW: Uses argparse to accept a video id or URL and the pipeline limits.
Runs the async pipeline via asyncio.run(). Pipeline states are printed
to stderr as they are entered; the transcript goes to stdout.

RULES:
- Positional argument: video id or video URL
- Status output goes to stderr (not stdout), so stdout can be piped
- Exit code 1 with "Error: ..." on stderr for TranscriptError/ValueError
- Exit code 130 on Ctrl-C
- Python 3.9+ compatible (no match/case)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from transcript_bot.config import MAX_CHUNK_SIZE, MAX_CHUNKS, PUNCTUATION_RATIO_THRESHOLD
from transcript_bot.errors import TranscriptError
from transcript_bot.pipeline import PipelineConfig, PipelineResult, PipelineState, fetch_transcript
from transcript_bot.youtube.urls import extract_video_id, is_youtube_url, validate_video_id


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _on_state(state: PipelineState) -> None:
    _status("[{}]".format(state.value))


def resolve_video_id(value: str) -> str:
    """Turn a video id or URL into a validated video id.

    RULES:
    - URLs must be video URLs and contain an id (ValueError otherwise)
    - Anything else is treated as a bare id and validated
    """
    value = value.strip()
    if is_youtube_url(value):
        video_id = extract_video_id(value)
        if video_id is None:
            raise ValueError("No video id found in {}".format(value))
        return video_id
    return validate_video_id(value)


def _describe(result: PipelineResult) -> str:
    if result.method == "audio":
        return "Transcribed from audio"
    return "Rebuilt from captions: {} chunk(s), punctuation {}".format(
        result.chunk_count, "added" if result.corrected else "unchanged"
    )


async def _run(args: argparse.Namespace) -> None:
    video_id = resolve_video_id(args.video)

    config = PipelineConfig(
        max_chunk_size=args.max_chunk_size,
        max_chunks=args.max_chunks,
        punctuation_threshold=args.punctuation_threshold,
        correct=not args.no_correction,
    )

    _status("Fetching transcript for {}...".format(video_id))
    result = await fetch_transcript(video_id, config=config, on_state=_on_state)
    _status(_describe(result))

    print(result.text)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="transcript-bot",
        description="Print a transcript for a video, rebuilt from its automatic "
                    "captions or, when there are none, transcribed from its audio.",
    )

    parser.add_argument(
        "video",
        help="Video id or video URL.",
    )

    parser.add_argument(
        "--max-chunk-size",
        type=int,
        default=MAX_CHUNK_SIZE,
        help="Maximum characters per correction request (default: %(default)s).",
    )

    parser.add_argument(
        "--max-chunks",
        type=int,
        default=MAX_CHUNKS,
        help="Maximum correction requests per video (default: %(default)s).",
    )

    parser.add_argument(
        "--punctuation-threshold",
        type=float,
        default=PUNCTUATION_RATIO_THRESHOLD,
        help="Correct captions only when letters/digits outnumber punctuation "
             "by more than this ratio (default: %(default)s).",
    )

    parser.add_argument(
        "--no-correction",
        action="store_true",
        help="Return reconstructed captions without punctuation correction.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log pipeline and downloader details to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (TranscriptError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
