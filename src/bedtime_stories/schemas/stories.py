"""Schemas for story generation requests, saved stories and proxy payloads."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

# Display labels offered by the story form; the stored value is the lowercase label.
THEME_LABELS = [
    "Adventure",
    "Fantasy",
    "Space",
    "Animals",
    "Friendship",
    "Magic",
    "Ocean",
]

MOOD_LABELS = [
    "Happy",
    "Calm",
    "Excited",
    "Mysterious",
    "Gentle",
]

Theme = Literal[
    "adventure", "fantasy", "space", "animals", "friendship", "magic", "ocean"
]
Mood = Literal["happy", "calm", "excited", "mysterious", "gentle"]


def _label_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class StoryOption(BaseModel):
    """A selectable theme or mood."""

    label: str
    value: str


def theme_options() -> list[StoryOption]:
    return [StoryOption(label=label, value=label.lower()) for label in THEME_LABELS]


def mood_options() -> list[StoryOption]:
    return [StoryOption(label=label, value=label.lower()) for label in MOOD_LABELS]


class StoryRequestParameters(BaseModel):
    """Form state used to build a story prompt."""

    main_character: str = Field(default="", description="Main character's name.")
    age: str = Field(default="", description="Age of the child the story is for.")
    theme: Theme = Field(default="adventure")
    mood: Mood = Field(default="happy")

    @field_validator("age", mode="before")
    @classmethod
    def _coerce_age(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("theme", "mood", mode="before")
    @classmethod
    def _normalize_label(cls, value: Any) -> Any:
        return _label_value(value)


class SavedStory(BaseModel):
    """A story the user chose to keep in the local library."""

    id: int = Field(..., description="Milliseconds since the epoch at save time.")
    title: str
    content: str
    character: str
    theme: str
    date: str


class GenerateStoryPayload(BaseModel):
    prompt: str = Field(..., min_length=1)


class GenerateStoryResponse(BaseModel):
    story: str


class SynthesizeAudioPayload(BaseModel):
    text: str = Field(..., min_length=1)


class SynthesizeAudioResponse(BaseModel):
    audio_url: str


class StoryOptionsResponse(BaseModel):
    themes: list[StoryOption]
    moods: list[StoryOption]


__all__ = [
    "GenerateStoryPayload",
    "GenerateStoryResponse",
    "MOOD_LABELS",
    "Mood",
    "SavedStory",
    "StoryOption",
    "StoryOptionsResponse",
    "StoryRequestParameters",
    "SynthesizeAudioPayload",
    "SynthesizeAudioResponse",
    "THEME_LABELS",
    "Theme",
    "mood_options",
    "theme_options",
]
