"""Language-service response dataclasses.

WHY: The chat-completion and audio-transcription endpoints return JSON
objects. Typed dataclasses make the fields the bot relies on explicit
and keep dict-walking out of the client.

HOW: Each dataclass has a from_dict factory that parses the raw JSON
and raises ValueError when a required field is missing.

RULES:
- ChatCompletion.text is the content of the first choice's message
- AudioTranscription.text is the top-level "text" field
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ChatCompletion:
    """The first choice of a chat-completion response."""

    id: str
    model: str
    text: str
    finish_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatCompletion:
        choices = data.get("choices") or []
        if not choices:
            raise ValueError("Completion response contains no choices")
        first = choices[0]
        message = first.get("message") or {}
        return cls(
            id=data.get("id", ""),
            model=data.get("model", ""),
            text=message.get("content") or "",
            finish_reason=first.get("finish_reason"),
        )


@dataclass
class AudioTranscription:
    """Response of the audio transcription endpoint."""

    text: str

    @classmethod
    def from_dict(cls, data: dict) -> AudioTranscription:
        if "text" not in data:
            raise ValueError("Transcription response has no 'text' field")
        return cls(text=data["text"])
