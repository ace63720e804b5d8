"""TextEngineApp: main Textual application.

Starts the World, registers a single session whose input comes from the
command line widget, and runs the world loop as a worker. The app exits once
the loop has shut down.
"""

from __future__ import annotations

import asyncio
import logging

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Input

from config.settings import Settings
from core.messages import CommandInput, CommandOutput
from ui.widgets import TranscriptView
from world.game import World
from world.session import Session

logger = logging.getLogger(__name__)


class TextEngineApp(App):
    """Main Textual application for the Text Engine."""

    TITLE = "Text Engine"
    SUB_TITLE = "A small text world"

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: $surface;
    }
    #transcript {
        height: 1fr;
        border: round $primary;
    }
    #command {
        dock: bottom;
    }
    """

    def __init__(self, settings: Settings | None = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or Settings()
        self.world: World | None = None
        self.session: Session | None = None
        self._lines: asyncio.Queue[str] = asyncio.Queue()
        self._view: TranscriptView | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._view = TranscriptView(id="transcript", wrap=True, api_debug=self.settings.API_DEBUG)
        yield self._view
        yield Input(placeholder="look, wait 5, echo hello, help ...", id="command")
        yield Footer()

    async def on_mount(self) -> None:
        """Bootstrap the world on app mount."""
        self.world = World(settings=self.settings)
        await self.world.start()
        self.session = await self.world.register_session(self._read_line, self._show_output)
        self.run_worker(self._run_world(), name="world-loop", exclusive=True)
        self.query_one("#command", Input).focus()

    async def _run_world(self) -> None:
        try:
            await self.world.run()
        finally:
            await self.world.stop()
            logger.info("World loop ended, closing the app")
            self.exit()

    async def _read_line(self, session: Session) -> str:
        return await self._lines.get()

    def _show_output(
        self,
        session: Session,
        output: CommandOutput,
        command_input: CommandInput | None,
        error: Exception | None,
    ) -> None:
        self._view.add_output(output)

    @property
    def transcript(self) -> list[str]:
        return self._view.lines

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        if not text.strip():
            return
        self._view.add_command(text)
        await self._lines.put(text)

    async def action_quit(self) -> None:
        """Graceful shutdown."""
        if self.world is not None and self.world.loop.running:
            self.world.loop.stop()
        else:
            self.exit()
