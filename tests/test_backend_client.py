"""Tests for the proxy-backed capability clients."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from bedtime_stories.services.backend_client import (
    BackendSpeechSynthesizer,
    BackendTextGenerator,
)
from bedtime_stories.services.types import SpeechSynthesisError, TextGenerationError

SERVER = "http://localhost:8000/"


def _response(status_code: int, json_body) -> httpx.Response:
    return httpx.Response(
        status_code, json=json_body, request=httpx.Request("POST", SERVER)
    )


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
async def test_text_generator_posts_prompt_to_proxy():
    with patch("bedtime_stories.services.backend_client.httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, response=_response(200, {"story": "Tale"}))
        story = await BackendTextGenerator(SERVER).generate("Prompt")

    assert story == "Tale"
    args, kwargs = mock_client.post.call_args
    assert args[0] == "http://localhost:8000/api/stories/generate"
    assert kwargs["json"] == {"prompt": "Prompt"}


@pytest.mark.anyio
async def test_speech_synthesizer_posts_text_to_proxy():
    with patch("bedtime_stories.services.backend_client.httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(
            mock_client_cls, response=_response(200, {"audio_url": "https://a/b.wav"})
        )
        audio_url = await BackendSpeechSynthesizer(SERVER).synthesize("Story")

    assert audio_url == "https://a/b.wav"
    assert mock_client.post.call_args.args[0] == "http://localhost:8000/api/stories/audio"
    assert mock_client.post.call_args.kwargs["json"] == {"text": "Story"}


@pytest.mark.anyio
async def test_proxy_error_detail_is_carried():
    with patch("bedtime_stories.services.backend_client.httpx.AsyncClient") as mock_client_cls:
        _mock_client(
            mock_client_cls,
            response=_response(503, {"detail": "Story generation is not configured on server"}),
        )
        with pytest.raises(TextGenerationError) as exc_info:
            await BackendTextGenerator(SERVER).generate("Prompt")

    assert exc_info.value.status_code == 503
    assert exc_info.value.detail == "Story generation is not configured on server"


@pytest.mark.anyio
async def test_unreachable_proxy_raises_synthesis_error():
    with patch("bedtime_stories.services.backend_client.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, error=httpx.ConnectError("refused"))
        with pytest.raises(SpeechSynthesisError) as exc_info:
            await BackendSpeechSynthesizer(SERVER).synthesize("Story")

    assert exc_info.value.status_code == 502


@pytest.mark.anyio
async def test_missing_audio_url_raises():
    with patch("bedtime_stories.services.backend_client.httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, response=_response(200, {"audio_url": ""}))
        with pytest.raises(SpeechSynthesisError):
            await BackendSpeechSynthesizer(SERVER).synthesize("Story")
