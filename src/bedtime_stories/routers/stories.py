"""Server-side proxy for story text and audio generation."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..schemas.stories import (
    GenerateStoryPayload,
    GenerateStoryResponse,
    StoryOptionsResponse,
    SynthesizeAudioPayload,
    SynthesizeAudioResponse,
    mood_options,
    theme_options,
)
from ..services.types import (
    SpeechSynthesisError,
    SpeechSynthesizer,
    TextGenerationError,
    TextGenerator,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stories", tags=["stories"])


def get_text_generator(request: Request) -> TextGenerator:
    generator = getattr(request.app.state, "text_generator", None)
    if generator is None:  # pragma: no cover - defensive
        raise RuntimeError("Text generator is not configured")
    return generator


def get_speech_synthesizer(request: Request) -> SpeechSynthesizer:
    synthesizer = getattr(request.app.state, "speech_synthesizer", None)
    if synthesizer is None:  # pragma: no cover - defensive
        raise RuntimeError("Speech synthesizer is not configured")
    return synthesizer


@router.get("/options", response_model=StoryOptionsResponse)
async def get_story_options() -> StoryOptionsResponse:
    """List the themes and moods the story form offers."""
    return StoryOptionsResponse(themes=theme_options(), moods=mood_options())


@router.post("/generate", response_model=GenerateStoryResponse)
async def generate_story(
    payload: GenerateStoryPayload,
    generator: TextGenerator = Depends(get_text_generator),
) -> GenerateStoryResponse:
    try:
        story = await generator.generate(payload.prompt)
    except TextGenerationError as exc:
        logger.warning("Story generation failed (%s): %s", exc.status_code, exc.detail)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return GenerateStoryResponse(story=story)


@router.post("/audio", response_model=SynthesizeAudioResponse)
async def synthesize_audio(
    payload: SynthesizeAudioPayload,
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
) -> SynthesizeAudioResponse:
    try:
        audio_url = await synthesizer.synthesize(payload.text)
    except SpeechSynthesisError as exc:
        logger.warning("Audio synthesis failed (%s): %s", exc.status_code, exc.detail)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return SynthesizeAudioResponse(audio_url=audio_url)


__all__ = ["router"]
