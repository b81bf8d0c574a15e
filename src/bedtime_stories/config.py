"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

CACHE_DIR = Path.home() / ".cache" / "bedtime-stories"

DEFAULT_GOOEY_TTS_URL = "https://api.gooey.ai/v2/TextToSpeech?example_id=0pkn43u9"


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google Gemini (story text)
    gemini_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices(
            "GEMINI_API_KEY",
            "NEXT_PUBLIC_GEMINI_API_KEY",
            "gemini_api_key",
        ),
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model"),
    )
    gemini_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl(
            "https://generativelanguage.googleapis.com/v1beta"
        ),
        validation_alias=AliasChoices("GEMINI_BASE_URL", "gemini_base_url"),
    )

    # Gooey.AI text-to-speech (story audio). Server-side only.
    gooey_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("GOOEY_API_KEY", "gooey_api_key"),
    )
    gooey_tts_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl(DEFAULT_GOOEY_TTS_URL),
        validation_alias=AliasChoices("GOOEY_TTS_URL", "gooey_tts_url"),
    )
    tts_provider: str = Field(
        default="BARK",
        validation_alias=AliasChoices("TTS_PROVIDER", "tts_provider"),
    )
    elevenlabs_voice_id: str = Field(
        default="21m00Tcm4TlvDq8ikWAM",
        validation_alias=AliasChoices("ELEVENLABS_VOICE_ID", "elevenlabs_voice_id"),
    )

    request_timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("REQUEST_TIMEOUT", "timeout"),
        ge=1,
    )

    # Terminal frontend
    backend_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("http://localhost:8000"),
        validation_alias=AliasChoices("STORY_BACKEND_URL", "backend_url"),
    )
    saved_stories_path: Path = Field(
        default_factory=lambda: CACHE_DIR / "bedtime_stories.json",
        validation_alias=AliasChoices("SAVED_STORIES_PATH", "saved_stories_path"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["CACHE_DIR", "Settings", "get_settings"]
