"""Application factory for the story proxy service."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .routers.stories import router as stories_router
from .services.gemini import GeminiTextGenerator
from .services.gooey_tts import GooeySpeechSynthesizer

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(default_log_file: str | None = None) -> None:
    """Configure logging based on LOG_LEVEL and LOG_FILE environment variables."""
    # Load .env file first to ensure LOG_FILE is available
    load_dotenv()

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = []

    log_file = os.getenv("LOG_FILE") or default_log_file
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # The terminal frontend passes a default file and keeps the console clean
    if default_log_file is None:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    logging.getLogger("bedtime_stories").setLevel(log_level)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(log_level)

    # httpx logs every request at INFO
    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(settings: Settings | None = None) -> FastAPI:
    configure_logging()

    settings = settings or get_settings()

    text_generator = GeminiTextGenerator(settings)
    speech_synthesizer = GooeySpeechSynthesizer(settings)

    if settings.gemini_api_key is None:
        logging.warning("GEMINI_API_KEY is not set; story generation will fail")
    if settings.gooey_api_key is None:
        logging.warning("GOOEY_API_KEY is not set; audio generation will fail")

    app = FastAPI(
        title="Bedtime Stories Backend",
        version="0.1.0",
        description="Server-side proxy for bedtime story text and audio generation.",
    )

    app.state.settings = settings
    app.state.text_generator = text_generator
    app.state.speech_synthesizer = speech_synthesizer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(stories_router)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {
            "status": "ok",
            "model": text_generator.model,
            "tts_provider": speech_synthesizer.provider,
        }

    return app


__all__ = ["configure_logging", "create_app"]
