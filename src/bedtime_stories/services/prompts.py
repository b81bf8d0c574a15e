"""Prompt templating for bedtime stories."""

from __future__ import annotations

from ..schemas.stories import StoryRequestParameters

STORY_PROMPT_TEMPLATE = (
    "Create a bedtime story in 500 or less characters for a {age} year old child.\n"
    "The main character is named {main_character}.\n"
    "The story should be {theme} themed and have a {mood} mood.\n"
    "Make it engaging and end with a good moral lesson."
)


def build_story_prompt(params: StoryRequestParameters) -> str:
    """Render the story prompt for the given form state."""

    return STORY_PROMPT_TEMPLATE.format(
        age=params.age,
        main_character=params.main_character,
        theme=params.theme,
        mood=params.mood,
    )


__all__ = ["STORY_PROMPT_TEMPLATE", "build_story_prompt"]
