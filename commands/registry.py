"""Command table: named commands, each with ordered text-matching variants.

The registry is built once at startup and handed to the world. Matching is
first-match-wins over commands in registration order, then over each
command's variants in registration order, so the order in which commands are
registered is part of the configuration.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Awaitable, Callable, Iterator

from core.messages import CommandInput

if TYPE_CHECKING:
    from world.session import Session

logger = logging.getLogger(__name__)

Handler = Callable[["Session", CommandInput], Awaitable[None]]
Extractor = Callable[[re.Match], dict[str, str]]


def _no_arguments(match: re.Match) -> dict[str, str]:
    return {}


class CommandVariant:
    """One pattern plus the function that turns its match into arguments."""

    def __init__(self, command: Command, name: str, pattern: str, extract: Extractor):
        self.command = command
        self.name = name
        self.regex = re.compile(pattern)
        self.extract = extract

    def __repr__(self) -> str:
        return f"CommandVariant({self.command.name}/{self.name}: {self.regex.pattern!r})"


class Command:
    """A named command with a single handler."""

    def __init__(self, name: str, handler: Handler, help: str = ""):
        self.name = name
        self.handler = handler
        self.help = help
        self._variants: dict[str, CommandVariant] = {}

    @property
    def variants(self) -> list[CommandVariant]:
        return list(self._variants.values())

    def variant(
        self,
        name: str,
        pattern: str,
        extract: Extractor | None = None,
    ) -> CommandVariant:
        """Add a variant. Patterns run against normalized (lower-case) text."""
        if name in self._variants:
            raise ValueError(f"Command {self.name} already has a variant {name}")
        variant = CommandVariant(self, name, pattern, extract or _no_arguments)
        self._variants[name] = variant
        return variant


class CommandRegistry:
    """Ordered table of commands."""

    def __init__(self):
        self._commands: dict[str, Command] = {}

    def register(self, name: str, handler: Handler, help: str = "") -> Command:
        if name in self._commands:
            raise ValueError(f"Command {name} is already registered")
        command = Command(name, handler, help)
        self._commands[name] = command
        logger.debug("Registered command %s", name)
        return command

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def names(self) -> list[str]:
        return list(self._commands)

    def iter_variants(self) -> Iterator[CommandVariant]:
        """All variants in match order."""
        for command in self._commands.values():
            yield from command.variants
