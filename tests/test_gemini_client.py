"""Tests for the Gemini story generator."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from pydantic import SecretStr

from bedtime_stories.config import Settings
from bedtime_stories.services.gemini import GeminiTextGenerator
from bedtime_stories.services.types import TextGenerationError

GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash:generateContent"
)


def _make_settings(**overrides) -> Settings:
    values = {"gemini_api_key": SecretStr("test-gemini-key")}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _response(status_code: int, json_body=None, content: bytes | None = None) -> httpx.Response:
    request = httpx.Request("POST", GEMINI_URL)
    if content is not None:
        return httpx.Response(status_code, content=content, request=request)
    return httpx.Response(status_code, json=json_body, request=request)


def _mock_client(mock_client_cls, *, response=None, error=None) -> AsyncMock:
    mock_client = AsyncMock()
    if error is not None:
        mock_client.post.side_effect = error
    else:
        mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.mark.anyio
async def test_generate_returns_candidate_text():
    body = {
        "candidates": [
            {"content": {"parts": [{"text": "Once upon a time, "}, {"text": "Mia flew."}]}}
        ]
    }

    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, response=_response(200, body))
        story = await GeminiTextGenerator(_make_settings()).generate("Write a story")

    assert story == "Once upon a time, Mia flew."
    args, kwargs = mock_client.post.call_args
    assert args[0] == GEMINI_URL
    assert kwargs["headers"]["x-goog-api-key"] == "test-gemini-key"
    assert kwargs["json"] == {"contents": [{"parts": [{"text": "Write a story"}]}]}


@pytest.mark.anyio
async def test_generate_uses_configured_model():
    body = {"candidates": [{"content": {"parts": [{"text": "story"}]}}]}
    settings = _make_settings(gemini_model="gemini-2.0-flash")

    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, response=_response(200, body))
        await GeminiTextGenerator(settings).generate("prompt")

    assert mock_client.post.call_args.args[0].endswith(
        "/models/gemini-2.0-flash:generateContent"
    )


@pytest.mark.anyio
async def test_generate_without_key_is_unavailable():
    generator = GeminiTextGenerator(Settings(_env_file=None, gemini_api_key=None))

    with pytest.raises(TextGenerationError) as exc_info:
        await generator.generate("prompt")

    assert exc_info.value.status_code == 503


@pytest.mark.anyio
async def test_generate_surfaces_api_error_message():
    body = {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}}

    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, response=_response(400, body))
        with pytest.raises(TextGenerationError) as exc_info:
            await GeminiTextGenerator(_make_settings()).generate("prompt")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "API key not valid"


@pytest.mark.anyio
async def test_generate_wraps_transport_errors():
    error = httpx.ConnectError("connection refused")

    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, error=error)
        with pytest.raises(TextGenerationError) as exc_info:
            await GeminiTextGenerator(_make_settings()).generate("prompt")

    assert exc_info.value.status_code == 502


@pytest.mark.anyio
async def test_generate_rejects_empty_candidates():
    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, response=_response(200, {"candidates": []}))
        with pytest.raises(TextGenerationError) as exc_info:
            await GeminiTextGenerator(_make_settings()).generate("prompt")

    assert exc_info.value.status_code == 502


@pytest.mark.anyio
async def test_generate_rejects_non_json_body():
    with patch("bedtime_stories.services.gemini.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, response=_response(200, content=b"<html>"))
        with pytest.raises(TextGenerationError):
            await GeminiTextGenerator(_make_settings()).generate("prompt")
