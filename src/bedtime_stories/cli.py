"""Story Creator - terminal frontend for the bedtime stories backend.

Keeps the story form, the current story and the saved-story library in a
``StorySession``. Text and audio requests go through the backend proxy; the
library lives in a local JSON file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import webbrowser
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.style import Style
from rich.table import Table

from .app import configure_logging
from .config import CACHE_DIR, get_settings
from .schemas.stories import MOOD_LABELS, THEME_LABELS
from .services.backend_client import BackendSpeechSynthesizer, BackendTextGenerator
from .services.story_session import StorySession
from .services.story_storage import JsonFileStoryStorage

STORY_STYLE = Style(color="bright_magenta")
ERROR_STYLE = Style(color="red", bold=True)
INFO_STYLE = Style(color="cyan")

PREVIEW_LINES = 3

logger = logging.getLogger(__name__)


class StoryShell:
    """Interactive story creator bound to a ``StorySession``."""

    def __init__(
        self,
        session: StorySession,
        *,
        server_url: Optional[str] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.session = session
        self.server_url = server_url.rstrip("/") if server_url else None
        self.console = console or Console()
        self.running = True

    async def _check_health(self) -> bool:
        """Check if backend is reachable."""
        if self.server_url is None:
            return True
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self.server_url}/health")
                if resp.status_code == 200:
                    data = resp.json()
                    if not isinstance(data, dict):
                        raise ValueError(f"unexpected health response: {data!r}")
                    self.console.print(
                        f"[dim]Connected to backend. Model: {data.get('model', 'unknown')}, "
                        f"voice: {data.get('tts_provider', 'unknown')}[/dim]"
                    )
                    return True
                self.console.print(
                    f"Backend health check failed: {resp.status_code}",
                    style=ERROR_STYLE,
                )
        except (httpx.HTTPError, ValueError) as e:
            self.console.print(
                f"Cannot connect to backend: {escape(str(e))}", style=ERROR_STYLE
            )
        return False

    def _show_help(self) -> None:
        """Show available commands."""
        help_text = f"""
[bold]Story settings:[/bold]
  /name <name>       Main character's name
  /age <age>         Character's age
  /theme <theme>     {", ".join(THEME_LABELS)}
  /mood <mood>       {", ".join(MOOD_LABELS)}
  /settings          Show current settings

[bold]Story:[/bold]
  /create            Create a magical story
  /audio             Generate audio for the current story
  /play              Open the story audio in a browser
  /title <title>     Set the title used when saving
  /save \\[title]     Save the current story to the library
  /library           Show saved stories

  /help              Show this help message
  /quit              Exit
"""
        self.console.print(
            Panel(help_text.strip(), title="Story Creator Help", border_style="magenta")
        )

    def _show_settings(self) -> None:
        settings = self.session.settings
        table = Table(show_header=False, box=None)
        table.add_row("Character", escape(settings.main_character) or "[dim](not set)[/dim]")
        table.add_row("Age", escape(settings.age) or "[dim](not set)[/dim]")
        table.add_row("Theme", settings.theme.capitalize())
        table.add_row("Mood", settings.mood.capitalize())
        self.console.print(Panel(table, title="Story Settings", border_style="dim"))

    def _update(self, **changes: str) -> None:
        try:
            self.session.update_settings(**changes)
        except ValidationError as e:
            field = next(iter(changes))
            self.console.print(
                f"Invalid {field}: {e.errors()[0]['msg']}",
                style=ERROR_STYLE,
            )
            return
        self._show_settings()

    def _show_story(self) -> None:
        if not self.session.generated_story:
            return
        self.console.print(
            Panel(
                escape(self.session.generated_story),
                title="Your Magical Story",
                border_style="magenta",
                style=STORY_STYLE,
            )
        )
        if self.session.audio_url:
            self.console.print(f"Audio: {self.session.audio_url}", style=INFO_STYLE)

    async def _create_story(self) -> None:
        with self.console.status("Creating..."):
            story = await self.session.generate_story()
        if story is None:
            self.console.print("[dim]No new story this time.[/dim]")
            return
        self._show_story()

    async def _generate_audio(self) -> None:
        if not self.session.generated_story:
            self.console.print("[dim]Create a story first with /create[/dim]")
            return
        with self.console.status("Generating audio..."):
            audio_url = await self.session.generate_audio()
        if audio_url is None:
            self.console.print("[dim]No audio available.[/dim]")
            return
        self.console.print(f"Audio: {audio_url}", style=INFO_STYLE)

    def _play(self) -> None:
        if not self.session.audio_url:
            self.console.print("[dim]Generate audio first with /audio[/dim]")
            return
        webbrowser.open(self.session.audio_url)

    def _save(self, title: Optional[str]) -> None:
        if not self.session.generated_story:
            self.console.print("[dim]Nothing saved: create a story first with /create[/dim]")
            return
        if title:
            self.session.story_title = title
        try:
            saved = self.session.save_story()
        except OSError as e:
            logger.exception("Failed to save story")
            self.console.print(f"Could not save story: {escape(str(e))}", style=ERROR_STYLE)
            return
        if saved is None:
            self.console.print("[dim]Nothing saved: need both a story and a title.[/dim]")
            return
        self.console.print(
            f"Saved '{escape(saved.title)}' ({len(self.session.saved_stories)} in library)",
            style=INFO_STYLE,
        )

    def _show_library(self) -> None:
        stories = self.session.saved_stories
        if not stories:
            self.console.print("[dim]No saved stories yet.[/dim]")
            return
        table = Table(title="Story Library", show_lines=True)
        table.add_column("Title", style="bold")
        table.add_column("Character")
        table.add_column("Theme")
        table.add_column("Date", style="dim")
        table.add_column("Story")
        for story in stories:
            preview = "\n".join(story.content.splitlines()[:PREVIEW_LINES])
            table.add_row(
                escape(story.title),
                escape(story.character),
                story.theme,
                story.date,
                escape(preview),
            )
        self.console.print(table)

    async def _handle_command(self, cmd: str) -> bool:
        """Handle slash commands. Returns True if handled."""
        parts = cmd.strip().split(maxsplit=1)
        if not parts:
            return False

        command = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if command == "/help":
            self._show_help()
        elif command == "/quit":
            self.running = False
        elif command == "/settings":
            self._show_settings()
        elif command == "/name":
            self._update(main_character=arg)
        elif command == "/age":
            self._update(age=arg)
        elif command in ("/theme", "/mood"):
            if arg:
                self._update(**{command[1:]: arg})
            else:
                self.console.print(f"[dim]Usage: {command} <{command[1:]}>[/dim]")
        elif command == "/create":
            await self._create_story()
        elif command == "/audio":
            await self._generate_audio()
        elif command == "/play":
            self._play()
        elif command == "/title":
            self.session.story_title = arg
        elif command == "/save":
            self._save(arg or None)
        elif command == "/library":
            self._show_library()
        else:
            return False
        return True

    async def run(self) -> None:
        """Main input loop."""
        if not await self._check_health():
            return

        self.console.print()
        self.console.print(
            "[bold]Story Creator[/bold] - Type /help for commands, Ctrl+D to exit",
            style=INFO_STYLE,
        )
        self.console.print()

        while self.running:
            try:
                user_input = Prompt.ask("[bold magenta]Story[/bold magenta]")
                if not user_input.strip():
                    continue
                if not await self._handle_command(user_input):
                    self.console.print("[dim]Unknown command. Type /help.[/dim]")
            except EOFError:
                self.console.print("\n[dim]Goodnight![/dim]")
                break
            except KeyboardInterrupt:
                self.console.print()
                continue


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Story Creator - bedtime stories in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  STORY_BACKEND_URL     Default backend URL
  SAVED_STORIES_PATH    Where the story library is kept
""",
    )
    parser.add_argument(
        "--server",
        "-s",
        default=str(settings.backend_url),
        help="Backend server URL (default: %(default)s)",
    )
    parser.add_argument(
        "--library",
        default=str(settings.saved_stories_path),
        help="Story library file (default: %(default)s)",
    )
    args = parser.parse_args()

    configure_logging(default_log_file=str(CACHE_DIR / "story-creator.log"))

    session = StorySession(
        BackendTextGenerator(args.server, timeout=settings.request_timeout),
        BackendSpeechSynthesizer(args.server, timeout=settings.request_timeout),
        JsonFileStoryStorage(Path(args.library).expanduser()),
    )
    shell = StoryShell(session, server_url=args.server)
    try:
        asyncio.run(shell.run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
