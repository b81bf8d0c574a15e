"""Gooey.AI text-to-speech client.

The Gooey key is a server-side secret, so this client only runs inside the
backend proxy; the terminal frontend reaches it through ``/api/stories/audio``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import status

from ..config import Settings
from .types import SpeechSynthesisError, extract_error_detail

logger = logging.getLogger(__name__)


class GooeySpeechSynthesizer:
    """Turn story text into a hosted audio file and return its URL."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def provider(self) -> str:
        return self._settings.tts_provider

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.gooey_api_key
        if api_key is None or not api_key.get_secret_value():
            logger.error("Gooey API key not configured")
            raise SpeechSynthesisError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Speech synthesis is not configured on server",
            )
        return {
            "Authorization": f"Bearer {api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    def build_payload(self, text: str) -> dict[str, str]:
        return {
            "text_prompt": text,
            "tts_provider": self._settings.tts_provider,
            "elevenlabs_voice_id": self._settings.elevenlabs_voice_id,
        }

    async def synthesize(self, text: str) -> str:
        headers = self._headers()
        payload = self.build_payload(text)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.request_timeout, connect=10.0)
            ) as client:
                response = await client.post(
                    str(self._settings.gooey_tts_url), headers=headers, json=payload
                )
        except httpx.HTTPError as exc:
            raise SpeechSynthesisError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        if not response.is_success:
            detail = extract_error_detail(response.content, "Gooey")
            logger.error("Gooey TTS error response %s: %s", response.status_code, detail)
            # Redirects and other non-error statuses surface as a bad gateway
            status_code = (
                response.status_code
                if response.status_code >= 400
                else status.HTTP_502_BAD_GATEWAY
            )
            raise SpeechSynthesisError(
                status_code,
                f"Failed to generate audio: {response.status_code}",
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise SpeechSynthesisError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        audio_url = self._extract_audio_url(body)
        if not audio_url:
            raise SpeechSynthesisError(
                status.HTTP_502_BAD_GATEWAY, "Gooey response did not include audio_url"
            )
        logger.info("Gooey %s synthesized audio for %d characters", self.provider, len(text))
        return audio_url

    @staticmethod
    def _extract_audio_url(body: Any) -> str | None:
        if not isinstance(body, dict):
            return None
        audio_url = body.get("audio_url")
        if isinstance(audio_url, str) and audio_url:
            return audio_url
        # v2 responses nest results under "output"
        output = body.get("output")
        if isinstance(output, dict):
            nested = output.get("audio_url")
            if isinstance(nested, str) and nested:
                return nested
        return None


__all__ = ["GooeySpeechSynthesizer"]
