"""Turns a line of free text into a ``CommandInput``."""

from __future__ import annotations

import logging

from commands.registry import CommandRegistry
from core.messages import (
    ERROR_COMMAND,
    M_COMMAND,
    M_ERROR,
    M_TEXT,
    UNKNOWN_COMMAND,
    CommandInput,
)

logger = logging.getLogger(__name__)


def normalize(text: str) -> str:
    return text.strip().lower()


class TextInterpreter:
    """Greedy, order-sensitive matcher over a ``CommandRegistry``.

    Text that two variants could match is resolved purely by registration
    order. That is fine for a small fixed command set; it is not a grammar.
    """

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def interpret(self, text: str) -> CommandInput:
        normalized = normalize(text)

        for variant in self.registry.iter_variants():
            match = variant.regex.search(normalized)
            if match is None:
                continue
            try:
                values = variant.extract(match)
            except ValueError as e:
                logger.debug("Variant %r rejected %r: %s", variant, text, e)
                return CommandInput.make(ERROR_COMMAND, **{M_ERROR: str(e), M_TEXT: text})
            command_input = CommandInput(values)
            command_input[M_COMMAND] = variant.command.name
            return command_input

        return CommandInput.make(UNKNOWN_COMMAND, **{M_TEXT: text})
