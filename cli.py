"""CLI entry point: play in the console via Rich, no Textual UI.

Usage:
  python cli.py                         # Play using data/textengine.db
  python cli.py --database world.db     # Use another world file
  python cli.py --apidebug              # Also print every raw output map
  python cli.py --showlog               # Mirror the log to stderr
"""

from __future__ import annotations

import argparse
import asyncio

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from commands.builtin import QUIT
from config.settings import Settings
from core.messages import (
    ERROR_COMMAND,
    O_CLIENT_QUIT,
    O_WELCOME,
    O_WORLD_SHUTDOWN,
    UNKNOWN_COMMAND,
    CommandInput,
    CommandOutput,
)
from main import setup_logging
from store.database import MEMORY_DB
from world.game import World
from world.session import Session

console = Console()

OUTPUT_STYLES = {
    O_WELCOME: "bold green",
    O_CLIENT_QUIT: "dim",
    O_WORLD_SHUTDOWN: "bold magenta",
    UNKNOWN_COMMAND: "yellow",
    ERROR_COMMAND: "red",
}


class ConsoleClient:
    """Input/output functions for one session bound to a Rich console."""

    def __init__(self, console: Console, api_debug: bool = False):
        self.console = console
        self.api_debug = api_debug

    async def read(self, session: Session) -> str | CommandInput:
        try:
            return await asyncio.to_thread(Prompt.ask, "[bold cyan]>[/]", console=self.console)
        except EOFError:
            # Closed stdin means the player left
            return CommandInput.make(QUIT)

    def write(
        self,
        session: Session,
        output: CommandOutput,
        command_input: CommandInput | None,
        error: Exception | None,
    ) -> None:
        if self.api_debug:
            self.console.print(output.to_pretty_string(), style="dim", markup=False)
        if output.text:
            self.console.print(output.text, style=OUTPUT_STYLES.get(output.output, ""), markup=False)


async def play(settings: Settings, client: ConsoleClient) -> None:
    """Start the world, attach one console session and run until it ends."""
    world = World(settings=settings)
    await world.start()
    try:
        await world.register_session(client.read, client.write)
        await world.run()
    finally:
        await world.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Text Engine console client",
        prog="python cli.py",
    )
    parser.add_argument("--database", help="SQLite world file (':memory:' for a throwaway world)")
    parser.add_argument("--apidebug", action="store_true", help="Print raw output maps")
    parser.add_argument("--showlog", action="store_true", help="Mirror the log to stderr")
    return parser


def build_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.database:
        overrides["DB_PATH"] = args.database
    if args.apidebug:
        overrides["API_DEBUG"] = True
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = build_settings(args)
    setup_logging(settings, show_log=args.showlog)

    if settings.DB_PATH != MEMORY_DB:
        console.print(Panel(f"World file: {settings.DB_PATH}", title="Text Engine", border_style="green"))
    console.print("[dim]Type 'help' for commands, 'quit' to leave.[/]\n")

    client = ConsoleClient(console, api_debug=settings.API_DEBUG)
    try:
        asyncio.run(play(settings, client))
    except KeyboardInterrupt:
        console.print("[dim]Interrupted.[/]")


if __name__ == "__main__":
    main()
