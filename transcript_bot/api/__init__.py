"""Language-service client package: chat completion and speech-to-text.

WHY: The bot corrects caption prose, summarizes transcripts, and
transcribes audio through one hosted API. This package encapsulates
that communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is
parsed into dataclasses defined in models.py.

RULES:
- All service HTTP calls go through OpenAIClient
- Authentication is via Bearer token from config
"""

from transcript_bot.api.client import OpenAIAPIError, OpenAIClient

__all__ = ["OpenAIAPIError", "OpenAIClient"]
