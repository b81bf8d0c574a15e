"""Google Gemini client used to write bedtime stories."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import status

from ..config import Settings
from .types import TextGenerationError, extract_error_detail

logger = logging.getLogger(__name__)


class GeminiTextGenerator:
    """Generate story text with the Gemini ``generateContent`` endpoint."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def model(self) -> str:
        return self._settings.gemini_model

    @property
    def _url(self) -> str:
        base_url = str(self._settings.gemini_base_url).rstrip("/")
        return f"{base_url}/models/{self.model}:generateContent"

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.gemini_api_key
        if api_key is None or not api_key.get_secret_value():
            logger.error("Gemini API key not configured")
            raise TextGenerationError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Story generation is not configured on server",
            )
        return {
            "x-goog-api-key": api_key.get_secret_value(),
            "Content-Type": "application/json",
        }

    async def generate(self, prompt: str) -> str:
        headers = self._headers()
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.request_timeout, connect=10.0)
            ) as client:
                response = await client.post(self._url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise TextGenerationError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        if response.status_code >= 400:
            detail = extract_error_detail(response.content, "Gemini")
            raise TextGenerationError(response.status_code, detail)

        try:
            body = response.json()
        except ValueError as exc:
            raise TextGenerationError(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc

        text = self._extract_text(body)
        if not text:
            raise TextGenerationError(
                status.HTTP_502_BAD_GATEWAY, "Gemini returned no story text"
            )
        logger.info("Gemini generated %d characters with %s", len(text), self.model)
        return text

    @staticmethod
    def _extract_text(body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )


__all__ = ["GeminiTextGenerator"]
