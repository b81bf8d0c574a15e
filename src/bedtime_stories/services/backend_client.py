"""Capability clients that reach Gemini and Gooey through the backend proxy."""

from __future__ import annotations

import logging
from typing import Any, Type

import httpx
from fastapi import status

from .types import (
    SpeechSynthesisError,
    StoryServiceError,
    TextGenerationError,
    extract_error_detail,
)

logger = logging.getLogger(__name__)


class _BackendClient:
    def __init__(self, server_url: str, *, timeout: float = 60.0):
        self.server_url = server_url.rstrip("/")
        self._timeout = timeout

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        error_cls: Type[StoryServiceError],
    ) -> dict[str, Any]:
        url = f"{self.server_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise error_cls(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        if not response.is_success:
            detail = extract_error_detail(response.content, "Story backend")
            raise error_cls(response.status_code, detail)

        try:
            body = response.json()
        except ValueError as exc:
            raise error_cls(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
        if not isinstance(body, dict):
            raise error_cls(status.HTTP_502_BAD_GATEWAY, f"Unexpected response: {body!r}")
        return body


class BackendTextGenerator(_BackendClient):
    """``TextGenerator`` backed by ``POST /api/stories/generate``."""

    async def generate(self, prompt: str) -> str:
        body = await self._post(
            "/api/stories/generate", {"prompt": prompt}, TextGenerationError
        )
        story = body.get("story")
        if not isinstance(story, str):
            raise TextGenerationError(
                status.HTTP_502_BAD_GATEWAY, "Backend response did not include story"
            )
        return story


class BackendSpeechSynthesizer(_BackendClient):
    """``SpeechSynthesizer`` backed by ``POST /api/stories/audio``."""

    async def synthesize(self, text: str) -> str:
        body = await self._post(
            "/api/stories/audio", {"text": text}, SpeechSynthesisError
        )
        audio_url = body.get("audio_url")
        if not isinstance(audio_url, str) or not audio_url:
            raise SpeechSynthesisError(
                status.HTTP_502_BAD_GATEWAY, "Backend response did not include audio_url"
            )
        return audio_url


__all__ = ["BackendSpeechSynthesizer", "BackendTextGenerator"]
