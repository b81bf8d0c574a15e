"""State and actions behind the story creator.

A ``StorySession`` owns everything the story form works with: the request
parameters, the latest generated story, its audio URL, the title being typed
for saving, and the saved-story library. Network failures in either remote
call are logged and swallowed; callers only see the absence of a new result.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..schemas.stories import SavedStory, StoryRequestParameters
from .prompts import build_story_prompt
from .story_storage import StoryStorage
from .types import SpeechSynthesizer, TextGenerator

logger = logging.getLogger(__name__)

_FORM_FIELDS = frozenset(StoryRequestParameters.model_fields)


def format_save_date(moment: datetime) -> str:
    """Format a save date as ``M/D/YYYY``."""

    return f"{moment.month}/{moment.day}/{moment.year}"


class StorySession:
    """Story creator state bound to a generator, a synthesizer and a library."""

    def __init__(
        self,
        generator: TextGenerator,
        synthesizer: SpeechSynthesizer,
        storage: StoryStorage,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._generator = generator
        self._synthesizer = synthesizer
        self._storage = storage
        self._clock = clock

        self.settings = StoryRequestParameters()
        self.generated_story = ""
        self.audio_url = ""
        self.story_title = ""
        self.is_loading = False
        # Bumped whenever generated_story is replaced
        self._story_version = 0

        self._saved_stories: List[SavedStory] = storage.load()
        logger.debug("Loaded %d saved stories", len(self._saved_stories))

    @property
    def saved_stories(self) -> List[SavedStory]:
        return [story.model_copy() for story in self._saved_stories]

    def update_settings(self, **changes: Any) -> StoryRequestParameters:
        """Apply form edits; theme and mood must come from the fixed label sets."""

        unknown = set(changes) - _FORM_FIELDS
        if unknown:
            raise ValueError(f"Unknown story settings: {', '.join(sorted(unknown))}")
        merged = {**self.settings.model_dump(), **changes}
        self.settings = StoryRequestParameters.model_validate(merged)
        return self.settings

    def build_prompt(self) -> str:
        return build_story_prompt(self.settings)

    async def generate_story(self) -> Optional[str]:
        """Ask the generator for a new story and make it the current one."""

        self.is_loading = True
        try:
            prompt = self.build_prompt()
            story = await self._generator.generate(prompt)
            self.generated_story = story
            self.audio_url = ""
            self._story_version += 1
            return story
        except Exception:
            logger.exception("Error generating story")
            return None
        finally:
            self.is_loading = False

    async def generate_audio(self) -> Optional[str]:
        """Synthesize the current story and bind the resulting audio URL."""

        if not self.generated_story:
            return None
        version = self._story_version
        try:
            audio_url = await self._synthesizer.synthesize(self.generated_story)
        except Exception:
            logger.exception("Error generating audio")
            return None
        if version != self._story_version:
            logger.info("Discarding audio for a story that has since been replaced")
            return None
        self.audio_url = audio_url
        return audio_url

    def save_story(self) -> Optional[SavedStory]:
        """Append the current story to the library under ``story_title``."""

        if not self.story_title or not self.generated_story:
            return None

        now = self._clock()
        story = SavedStory(
            id=int(now.timestamp() * 1000),
            title=self.story_title,
            content=self.generated_story,
            character=self.settings.main_character,
            theme=self.settings.theme,
            date=format_save_date(now),
        )
        updated = [*self._saved_stories, story]
        self._storage.save(updated)
        self._saved_stories = updated
        self.story_title = ""
        logger.info("Saved story %r (%d in library)", story.title, len(updated))
        return story


__all__ = ["StorySession", "format_save_date"]
