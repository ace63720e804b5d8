"""Command interpretation and dispatch pipeline."""

from commands.builtin import build_default_registry, register_builtin_commands
from commands.dispatcher import Dispatcher
from commands.interpreter import TextInterpreter, normalize
from commands.registry import Command, CommandRegistry, CommandVariant

__all__ = [
    "Command",
    "CommandRegistry",
    "CommandVariant",
    "Dispatcher",
    "TextInterpreter",
    "build_default_registry",
    "normalize",
    "register_builtin_commands",
]
