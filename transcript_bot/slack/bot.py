"""Slack bot: Socket Mode event handlers and background workers.

WHY: Users paste video links or drop voice recordings into Slack and
want the text back in the same thread. This module is the glue between
Slack events and the transcript pipeline and the language service.

HOW: Uses slack-bolt with Socket Mode (no public URL needed).

  message with a video URL → progress message → TranscriptPipeline
      (progress edited on each state) → transcript parts in-thread
  file_shared audio file   → download with bot token → transcription
      service → text in-thread → temp file deleted
  Summarize button         → summary prompt from the clicked message
      → completion → summary in-thread

Every message with text gets a Summarize button, summaries included.

RULES:
- Events and actions return immediately; actions are ack()'d first
- Heavy work runs in daemon threads, each with its own event loop
  (asyncio.run) and its own OpenAIClient
- Bot messages and message edits are ignored
- Bot only watches SLACK_CHANNEL_ID (if configured)
- Failures in a worker are logged and reported in-thread, never raised
- Python 3.9+ compatible (no match/case)
- Runnable as: python -m transcript_bot --slack
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from transcript_bot.api.client import OpenAIClient
from transcript_bot.config import (
    HTTP_TIMEOUT_S,
    SLACK_APP_TOKEN,
    SLACK_BOT_TOKEN,
    SLACK_CHANNEL_ID,
)
from transcript_bot.core.prompts import build_summary_prompt
from transcript_bot.core.tempfiles import delete_file, unique_temp_path
from transcript_bot.pipeline import PipelineState, fetch_transcript
from transcript_bot.slack.messages import (
    ACTION_SUMMARIZE,
    build_error_blocks,
    build_progress_blocks,
    build_text_blocks,
    describe_result,
    extract_message_text,
    is_supported_audio,
    split_message_text,
)
from transcript_bot.youtube.urls import extract_video_id, find_youtube_url

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------


def create_app(bot_token: Optional[str] = None) -> App:
    """Create and configure the Slack Bolt app with all handlers.

    WHY: Factory function allows tests to inject a custom bot_token
    and avoids module-level side effects.

    RULES:
    - If bot_token is None, uses SLACK_BOT_TOKEN from config
    - All handlers are registered before returning
    """
    app = App(token=bot_token or SLACK_BOT_TOKEN)

    app.event("message")(handle_message)
    app.event("file_shared")(handle_file_shared)
    app.action(ACTION_SUMMARIZE)(handle_summarize)

    return app


def _watching(channel_id: str) -> bool:
    return not SLACK_CHANNEL_ID or channel_id == SLACK_CHANNEL_ID


def _start_worker(target: Callable[..., None], *args: Any) -> None:
    t = threading.Thread(target=target, args=args, daemon=True)
    t.start()


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------


def handle_message(event: Dict[str, Any], client: Any, logger: Any) -> None:
    """Handle plain messages: start a transcript for the first video link.

    RULES:
    - Messages with a subtype (edits, joins, bot posts) are ignored
    - Messages without a video URL or video id are ignored
    - Replies go to the message's thread (or start one)
    """
    if event.get("subtype") or event.get("bot_id"):
        return

    channel_id = event.get("channel", "")
    if not _watching(channel_id):
        return

    url = find_youtube_url(event.get("text", ""))
    if not url:
        return
    video_id = extract_video_id(url)
    if not video_id:
        logger.info("No video id in %s", url)
        return

    thread_ts = event.get("thread_ts") or event.get("ts", "")

    try:
        resp = client.chat_postMessage(
            channel=channel_id,
            thread_ts=thread_ts,
            blocks=build_progress_blocks(url, PipelineState.FETCHING_CAPTIONS),
            text="Processing {}...".format(url),
        )
    except Exception:
        logger.exception("Failed to post progress message for %s", url)
        return

    _start_worker(
        _run_video_transcript,
        client, channel_id, thread_ts, resp.get("ts", ""), url, video_id,
    )


def handle_file_shared(event: Dict[str, Any], client: Any, logger: Any) -> None:
    """Handle file_shared events: transcribe supported audio files.

    RULES:
    - Unsupported file types are silently ignored
    - If SLACK_CHANNEL_ID is set, only watch that channel
    """
    file_id = event.get("file_id", "")
    channel_id = event.get("channel_id", "")

    if not _watching(channel_id):
        return

    try:
        file_info_resp = client.files_info(file=file_id)
    except Exception:
        logger.exception("Failed to fetch file info for %s", file_id)
        return

    file_data = file_info_resp.get("file", {})
    filename = file_data.get("name", "")
    if not is_supported_audio(filename):
        return

    thread_ts = event.get("event_ts") or file_data.get("timestamp") or ""

    _start_worker(
        _run_audio_transcription,
        client, channel_id, str(thread_ts), filename, file_data.get("url_private", ""),
    )


# ---------------------------------------------------------------------------
# Action handlers
# ---------------------------------------------------------------------------


def handle_summarize(ack: Any, body: Any, client: Any, logger: Any) -> None:
    """Handle the Summarize button: summarize the message it belongs to.

    RULES:
    - ack() FIRST, before any processing
    - The summary is posted in the same thread as the clicked message
    """
    ack()

    message = body.get("message", {})
    channel = body.get("channel", {}).get("id", "")
    thread_ts = message.get("thread_ts") or message.get("ts", "")
    text = extract_message_text(message)

    if not text.strip():
        logger.info("Summarize clicked on a message without text")
        return

    _start_worker(_run_summary, client, channel, thread_ts, text)


# ---------------------------------------------------------------------------
# Background workers
# ---------------------------------------------------------------------------


def _run_video_transcript(
    client: Any,
    channel: str,
    thread_ts: str,
    message_ts: str,
    url: str,
    video_id: str,
) -> None:
    """Run the transcript pipeline for one video and post the result."""

    def on_state(state: PipelineState) -> None:
        _update_message(
            client, channel, message_ts,
            build_progress_blocks(url, state),
            "Processing {}...".format(url),
        )

    try:
        result = asyncio.run(fetch_transcript(video_id, on_state=on_state))
    except Exception as exc:
        logger.exception("Transcript pipeline failed for %s", video_id)
        _post_error(client, channel, thread_ts, url, str(exc))
        return

    _post_text(client, channel, thread_ts, result.text, describe_result(result))


def _run_audio_transcription(
    client: Any,
    channel: str,
    thread_ts: str,
    filename: str,
    url_private: str,
) -> None:
    """Download an uploaded audio file, transcribe it, and post the text."""
    if not url_private:
        _post_error(client, channel, thread_ts, filename, "Could not get file download URL")
        return

    audio_path = unique_temp_path(prefix="voice_", suffix=Path(filename).suffix.lower())
    try:
        with httpx.Client(timeout=HTTP_TIMEOUT_S) as http:
            dl_resp = http.get(
                url_private,
                headers={"Authorization": "Bearer {}".format(client.token)},
            )
            dl_resp.raise_for_status()
        audio_path.write_bytes(dl_resp.content)

        text = asyncio.run(_transcribe(audio_path))
    except Exception as exc:
        logger.exception("Audio transcription failed for %s", filename)
        _post_error(client, channel, thread_ts, filename, str(exc))
        return
    finally:
        delete_file(audio_path)

    _post_text(client, channel, thread_ts, text, "Transcript of {}".format(filename))


def _run_summary(client: Any, channel: str, thread_ts: str, text: str) -> None:
    """Summarize text with the language service and post the summary."""
    try:
        summary = asyncio.run(_complete(build_summary_prompt(text)))
    except Exception as exc:
        logger.exception("Summary request failed")
        _post_error(client, channel, thread_ts, "summary request", str(exc))
        return

    _post_text(client, channel, thread_ts, summary, "Summary")


async def _transcribe(audio_path: Path) -> str:
    async with OpenAIClient() as service:
        return await service.transcribe_audio(audio_path)


async def _complete(prompt: str) -> str:
    async with OpenAIClient() as service:
        return await service.complete(prompt)


# ---------------------------------------------------------------------------
# Slack helpers
# ---------------------------------------------------------------------------


def _post_text(
    client: Any,
    channel: str,
    thread_ts: str,
    text: str,
    heading: str,
) -> None:
    """Post text in-thread, one message per section-sized part."""
    for i, part in enumerate(split_message_text(text)):
        try:
            client.chat_postMessage(
                channel=channel,
                thread_ts=thread_ts,
                blocks=build_text_blocks(part, heading if i == 0 else None),
                text=heading,
            )
        except Exception:
            logger.exception("Failed to post message part %d", i + 1)
            return


def _update_message(
    client: Any,
    channel: str,
    message_ts: str,
    blocks: Any,
    text: str,
) -> None:
    """Edit a Slack message with new blocks."""
    if not message_ts:
        return
    try:
        client.chat_update(
            channel=channel,
            ts=message_ts,
            blocks=blocks,
            text=text,
        )
    except Exception:
        logger.exception("Failed to update message %s", message_ts)


def _post_error(
    client: Any,
    channel: str,
    thread_ts: str,
    subject: str,
    error: str,
) -> None:
    """Post an error message in the thread."""
    try:
        client.chat_postMessage(
            channel=channel,
            thread_ts=thread_ts,
            blocks=build_error_blocks(subject, error),
            text="Error while processing {}".format(subject),
        )
    except Exception:
        logger.exception("Failed to post error message")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Start the Slack bot in Socket Mode.

    RULES:
    - Requires SLACK_BOT_TOKEN and SLACK_APP_TOKEN environment variables
    - Blocks on the SocketModeHandler.start() call
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if not SLACK_BOT_TOKEN:
        raise ValueError("SLACK_BOT_TOKEN environment variable is required")
    if not SLACK_APP_TOKEN:
        raise ValueError("SLACK_APP_TOKEN environment variable is required")

    app = create_app(bot_token=SLACK_BOT_TOKEN)

    logger.info("Starting Slack bot in Socket Mode...")
    if SLACK_CHANNEL_ID:
        logger.info("Watching channel: %s", SLACK_CHANNEL_ID)
    else:
        logger.info("Watching all channels the bot is in")

    handler = SocketModeHandler(app, SLACK_APP_TOKEN)
    handler.start()


if __name__ == "__main__":
    main()
