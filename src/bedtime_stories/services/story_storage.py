"""Persistence for the saved-story library.

The library is a single serialized array that is read once when a session
starts and rewritten in full on every save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

from pydantic import ValidationError

from ..schemas.stories import SavedStory

logger = logging.getLogger(__name__)

STORAGE_KEY = "bedtimeStories"


class StoryStorage(Protocol):
    def load(self) -> List[SavedStory]: ...

    def save(self, stories: Sequence[SavedStory]) -> None: ...


def serialize_stories(stories: Sequence[SavedStory]) -> str:
    return json.dumps([story.model_dump(mode="json") for story in stories], indent=2)


def deserialize_stories(raw: Optional[str], *, source: str = STORAGE_KEY) -> List[SavedStory]:
    """Parse a serialized library, treating anything malformed as empty."""

    if raw is None or not raw.strip():
        return []
    try:
        items: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse saved stories from %s: %s", source, exc)
        return []
    if not isinstance(items, list):
        logger.warning(
            "Saved stories in %s are not a list (%s); starting empty",
            source,
            type(items).__name__,
        )
        return []

    loaded: List[SavedStory] = []
    for item in items:
        try:
            loaded.append(SavedStory.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid saved story entry: %s", exc)
    return loaded


class JsonFileStoryStorage:
    """Keep the library in one JSON file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[SavedStory]:
        if not self._path.exists():
            return []
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read saved stories file %s: %s", self._path, exc)
            return []
        return deserialize_stories(raw, source=str(self._path))

    def save(self, stories: Sequence[SavedStory]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(serialize_stories(stories) + "\n", encoding="utf-8")
        logger.info("Saved %d stories to %s", len(stories), self._path)


class InMemoryStoryStorage:
    """Hold the serialized library in memory, like a browser storage entry."""

    def __init__(self, raw: Optional[str] = None) -> None:
        self.raw = raw

    def load(self) -> List[SavedStory]:
        return deserialize_stories(self.raw)

    def save(self, stories: Sequence[SavedStory]) -> None:
        self.raw = serialize_stories(stories)


__all__ = [
    "InMemoryStoryStorage",
    "JsonFileStoryStorage",
    "STORAGE_KEY",
    "StoryStorage",
    "deserialize_stories",
    "serialize_stories",
]
