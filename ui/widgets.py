"""Reusable Textual widgets for the Text Engine TUI."""

from __future__ import annotations

from datetime import datetime, timezone

from rich.text import Text
from textual.widgets import RichLog

from core.messages import (
    ERROR_COMMAND,
    O_CLIENT_QUIT,
    O_WELCOME,
    O_WORLD_SHUTDOWN,
    UNKNOWN_COMMAND,
    CommandOutput,
)


class TranscriptView(RichLog):
    """Scrolling transcript of what the player typed and what the world said.

    Every line shown is also kept in ``lines`` as plain text.
    """

    OUTPUT_STYLES = {
        O_WELCOME: "bold green",
        O_CLIENT_QUIT: "dim italic",
        O_WORLD_SHUTDOWN: "bold magenta",
        UNKNOWN_COMMAND: "yellow",
        ERROR_COMMAND: "red",
    }

    def __init__(self, *args, api_debug: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.api_debug = api_debug
        self.lines: list[str] = []

    def add_command(self, text: str) -> None:
        now = datetime.now(timezone.utc).strftime("%H:%M")
        line = Text.assemble((f"{now} ", "dim"), ("> ", "bold cyan"), text)
        self.write(line)
        self.lines.append(f"> {text}")

    def add_output(self, output: CommandOutput) -> None:
        if self.api_debug:
            self.write(Text(output.to_pretty_string(), style="dim"))
        if not output.text:
            return
        # Multi-line outputs (help) keep their line breaks
        for text in output.text.splitlines():
            self.write(Text(text, style=self.OUTPUT_STYLES.get(output.output, "")))
            self.lines.append(text)
