"""Async HTTP client for the language-correction and transcription services.

WHY: Caption prose is sent to a chat-completion endpoint for punctuation
correction and summaries; audio files go to a speech-to-text endpoint
when no captions exist. This module hides the HTTP details behind one
client class so the pipeline and the front ends only see strings.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. OpenAIClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. complete() and transcribe_audio() are
independent calls that can run concurrently on one client.

RULES:
- Always use the async context manager (async with OpenAIClient(...) as client:)
- Prompts longer than PROMPT_SIZE_LIMIT are rejected before sending
- Audio files larger than MAX_AUDIO_BYTES are rejected before sending
- Non-2xx responses raise OpenAIAPIError; transport failures and
  malformed bodies raise ServiceError
- Nothing is retried
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

import httpx

from transcript_bot.api.models import AudioTranscription, ChatCompletion
from transcript_bot.config import (
    HTTP_TIMEOUT_S,
    MAX_AUDIO_BYTES,
    OPENAI_BASE_URL,
    OPENAI_COMPLETION_MODEL,
    OPENAI_TRANSCRIPTION_MODEL,
    PROMPT_SIZE_LIMIT,
    load_api_key,
)
from transcript_bot.errors import ServiceError

logger = logging.getLogger(__name__)


class OpenAIAPIError(ServiceError):
    """Raised when the service returns an error response.

    HOW: Wraps the HTTP status code and response body.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"OpenAI API error {status_code}: {message}")


class PromptTooLongError(ValueError):
    """Raised when a prompt exceeds PROMPT_SIZE_LIMIT.

    RULES:
    - Message includes the actual size and the limit
    - Raised before any API call is made
    """


class AudioFileTooLargeError(ValueError):
    """Raised when an audio file exceeds MAX_AUDIO_BYTES.

    RULES:
    - Message includes the actual size and the limit
    - Raised before any API call is made
    """


class OpenAIClient:
    """Async client for chat completion and audio transcription.

    RULES:
    - Use as: async with OpenAIClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model names default to the config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        completion_model: str | None = None,
        transcription_model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self._completion_model = completion_model or OPENAI_COMPLETION_MODEL
        self._transcription_model = transcription_model or OPENAI_TRANSCRIPTION_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> OpenAIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(HTTP_TIMEOUT_S, connect=HTTP_TIMEOUT_S),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "OpenAIClient must be used as an async context manager: "
                "async with OpenAIClient() as client: ..."
            )
        return self._client

    async def _post(self, path: str, **kwargs) -> dict:
        client = self._ensure_client()
        try:
            resp = await client.post(path, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(f"Request to {path} failed: {exc}") from exc

        if resp.status_code != 200:
            raise OpenAIAPIError(resp.status_code, resp.text)

        try:
            return resp.json()
        except ValueError as exc:
            raise ServiceError(f"Invalid JSON from {path}") from exc

    # ------------------------------------------------------------------
    # Chat completion
    # ------------------------------------------------------------------

    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the trimmed completion text.

        RULES:
        - len(prompt) must be <= PROMPT_SIZE_LIMIT (PromptTooLongError)
        - The prompt is sent as a single user message
        - "###" is passed as stop sequence

        Args:
            prompt: Instruction text followed by the user text.

        Returns:
            The first choice's content, stripped of surrounding whitespace.
        """
        if len(prompt) > PROMPT_SIZE_LIMIT:
            raise PromptTooLongError(
                f"Prompt length ({len(prompt):,} characters) must be at most "
                f"{PROMPT_SIZE_LIMIT:,} characters"
            )

        body = {
            "model": self._completion_model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": 1024,
            "stop": ["###"],
        }
        logger.debug("Completion request: %d characters", len(prompt))
        data = await self._post("/chat/completions", json=body)

        try:
            completion = ChatCompletion.from_dict(data)
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc
        return completion.text.strip()

    # ------------------------------------------------------------------
    # Audio transcription
    # ------------------------------------------------------------------

    async def transcribe_audio(self, file_path: Path) -> str:
        """Transcribe an audio file to text.

        RULES:
        - File must be at most MAX_AUDIO_BYTES (AudioFileTooLargeError)
        - Accepted formats are those of the service: m4a, mp3, webm, mp4,
          mpga, wav, mpeg

        Args:
            file_path: Path to the audio file.

        Returns:
            The transcription text.
        """
        file_path = Path(file_path)
        size = file_path.stat().st_size
        if size > MAX_AUDIO_BYTES:
            raise AudioFileTooLargeError(
                f"File size is too large. Max size is {MAX_AUDIO_BYTES // (1024 * 1024)}MB, "
                f"but is {size:,} bytes"
            )

        mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        logger.info("Transcribing %s (%d bytes)", file_path.name, size)
        data = await self._post(
            "/audio/transcriptions",
            data={"model": self._transcription_model},
            files={"file": (file_path.name, file_path.read_bytes(), mime_type)},
        )

        try:
            return AudioTranscription.from_dict(data).text
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc
