"""Capability interfaces and error types shared by the story services."""

from __future__ import annotations

import json
from typing import Any, Protocol


class StoryServiceError(Exception):
    """Wrap transport or API failures when talking to a remote story service."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(str(detail))
        self.status_code = status_code
        self.detail = detail


class TextGenerationError(StoryServiceError):
    """Raised when the generative-text API does not yield a story."""


class SpeechSynthesisError(StoryServiceError):
    """Raised when the speech API does not yield an audio URL."""


def extract_error_detail(raw: bytes, service: str) -> Any:
    """Pull the most useful message out of an upstream error body."""

    if not raw:
        return f"{service} returned an empty error response."
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return error or payload.get("detail") or payload
    return payload


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str) -> str: ...


__all__ = [
    "SpeechSynthesisError",
    "SpeechSynthesizer",
    "StoryServiceError",
    "TextGenerationError",
    "TextGenerator",
    "extract_error_detail",
]
