"""Block Kit builders and text helpers for the Slack bot.

WHY: The bot posts a handful of message shapes: a progress line while a
video is processed, the transcript or summary text with a Summarize
button, and error notices. Keeping the builders here lets bot.py stay
focused on event handling.

HOW: Each builder returns a list of Block Kit block dicts ready to be
passed to chat_postMessage(blocks=...) or chat_update(blocks=...).
Long texts are split word-safely with the same chunker the pipeline
uses for correction requests.

RULES:
- action_id values must match the handler registrations in bot.py
- Section text is at most SECTION_TEXT_LIMIT characters (Slack's cap)
- Transcript text goes into plain_text sections so caption words are
  never read as mrkdwn formatting
- Only blocks with block_id TEXT_BLOCK_ID carry summarizable text
- Python 3.9+ compatible (no match/case)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from transcript_bot.core.chunker import chunk_text
from transcript_bot.pipeline import PipelineResult, PipelineState

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Action IDs must match app.action() registrations in bot.py
ACTION_SUMMARIZE = "summarize_text"

TEXT_BLOCK_ID = "summarizable_text"

SECTION_TEXT_LIMIT = 3000

# Formats accepted by the transcription endpoint
SUPPORTED_AUDIO_EXTENSIONS = {
    ".flac", ".m4a", ".mp3", ".mp4", ".mpeg", ".mpga",
    ".oga", ".ogg", ".wav", ".webm",
}

_STATE_MESSAGES = {
    PipelineState.FETCHING_CAPTIONS: "Downloading captions...",
    PipelineState.RECONSTRUCTING: "Rebuilding text from captions...",
    PipelineState.CHUNKING: "Splitting text...",
    PipelineState.CORRECTING_CHUNKS: "Adding punctuation...",
    PipelineState.JOINED: "Done.",
    PipelineState.FETCHING_AUDIO: "No captions found, downloading audio...",
    PipelineState.TRANSCRIBING: "Transcribing audio...",
    PipelineState.DONE: "Done.",
    PipelineState.FAILED: "Failed.",
}


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


def format_state(state: PipelineState) -> str:
    """Human-readable line for a pipeline state."""
    return _STATE_MESSAGES.get(state, "Processing...")


def build_progress_blocks(url: str, state: PipelineState) -> List[Dict[str, Any]]:
    """Build Block Kit blocks for the in-thread progress message.

    HOW: One section with the video URL and the current state line. The
    bot edits this message as the pipeline moves through its states.
    """
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*{}*\n{}".format(url, format_state(state)),
            },
        },
    ]


# ---------------------------------------------------------------------------
# Transcript and summary text
# ---------------------------------------------------------------------------


def describe_result(result: PipelineResult) -> str:
    """Heading line for a transcript, naming where the text came from."""
    if result.method == "audio":
        return "Transcript from audio"
    if result.corrected:
        return "Transcript from captions (punctuation added, {} chunks)".format(
            result.chunk_count
        )
    return "Transcript from captions"


def split_message_text(text: str) -> List[str]:
    """Split text into parts that each fit one section block.

    RULES:
    - Word-safe; parts are at most SECTION_TEXT_LIMIT characters
    - Blank text yields a single empty-notice part, never []
    """
    parts = chunk_text(text, SECTION_TEXT_LIMIT)
    return parts or ["(no text)"]


def build_text_blocks(text: str, heading: Optional[str] = None) -> List[Dict[str, Any]]:
    """Build one message: optional heading, the text, and a Summarize button.

    WHY: Every transcript or summary message can be summarized again, so
    each one carries its own button and the handler only needs the
    message it was clicked on.

    RULES:
    - text must already fit SECTION_TEXT_LIMIT (see split_message_text)
    - The heading is a context block, excluded from summaries
    """
    blocks: List[Dict[str, Any]] = []

    if heading:
        blocks.append({
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": "*{}*".format(heading)}],
        })

    blocks.append({
        "type": "section",
        "block_id": TEXT_BLOCK_ID,
        "text": {"type": "plain_text", "text": text},
    })

    blocks.append({
        "type": "actions",
        "elements": [
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Summarize"},
                "action_id": ACTION_SUMMARIZE,
            },
        ],
    })

    return blocks


def extract_message_text(message: Dict[str, Any]) -> str:
    """Return the summarizable text of a posted message.

    HOW: Reads the TEXT_BLOCK_ID section; falls back to the message's
    plain ``text`` field for messages without blocks.
    """
    for block in message.get("blocks", []):
        if block.get("block_id") == TEXT_BLOCK_ID:
            return block.get("text", {}).get("text", "")
    return message.get("text", "")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def build_error_blocks(subject: str, error: str) -> List[Dict[str, Any]]:
    """Build Block Kit blocks for an error message.

    HOW: A section block with the subject in bold and the error details
    in a code block.
    """
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Error while processing {}*\n```{}```".format(subject, error),
            },
        },
    ]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_supported_audio(filename: str) -> bool:
    """Check if a filename has an extension the transcription service accepts.

    RULES:
    - Extension check is case-insensitive
    - Files without an extension are not supported
    """
    dot_idx = filename.rfind(".")
    if dot_idx < 0:
        return False
    return filename[dot_idx:].lower() in SUPPORTED_AUDIO_EXTENSIONS
