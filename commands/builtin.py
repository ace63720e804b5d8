"""Built-in commands.

Registration order is match order (first match wins):

    echo, look, go, wait, quit, help, unknowncommand, errorcommand

The last two have no variants; the interpreter produces them itself when
nothing matches or an extraction fails.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from commands.registry import CommandRegistry
from core.errors import ParseError
from core.messages import (
    ERROR_COMMAND,
    M_COMMAND,
    M_ENTITIES,
    M_ERROR,
    M_FROM,
    M_NOW,
    M_TARGET,
    M_TEXT,
    M_TIME,
    M_TO,
    O_NO_ENTITY,
    UNKNOWN_COMMAND,
    CommandInput,
    CommandOutput,
)
from store.entities import IN

if TYPE_CHECKING:
    from world.session import Session

logger = logging.getLogger(__name__)

ECHO = "echo"
LOOK = "look"
GO = "go"
WAIT = "wait"
QUIT = "quit"
HELP = "help"

DEFAULT_WAIT = 1
_WAIT_ARGUMENT_RE = re.compile(r"[+-]?[0-9]+")

NO_ENTITY_TEXT = "You are not connected to an in-world entity."
NOTHING_VISIBLE_TEXT = "You see nothing of interest."
NO_TIME_TRAVEL_TEXT = "Time does not run backwards."

# go failures
ERR_NO_DESTINATION = "no_destination"
ERR_DESTINATION_NOT_FOUND = "destination_not_found"
ERR_NOWHERE = "nowhere"
ERR_ALREADY_THERE = "already_there"


# --- echo ---

def _extract_echo(match: re.Match) -> dict[str, str]:
    return {M_TEXT: match.group(1)}


async def handle_echo(session: Session, command_input: CommandInput) -> None:
    session.send(CommandOutput.make(ECHO, command_input.text or ""))


# --- look ---

async def handle_look(session: Session, command_input: CommandInput) -> None:
    if session.entity_id is None:
        session.send(CommandOutput.make(O_NO_ENTITY, NO_ENTITY_TEXT))
        return

    result = await session.world.visibility.look(session.entity_id)
    session.send(CommandOutput.make(
        LOOK,
        result.text or NOTHING_VISIBLE_TEXT,
        **{M_ENTITIES: ",".join(result.entities)},
    ))


# --- go ---

def _extract_go(match: re.Match) -> dict[str, str]:
    return {M_TARGET: match.group(1)}


def _go_failure(session: Session, error: str, text: str) -> None:
    session.send(CommandOutput.make(GO, text, **{M_ERROR: error}))


async def handle_go(session: Session, command_input: CommandInput) -> None:
    if session.entity_id is None:
        session.send(CommandOutput.make(O_NO_ENTITY, NO_ENTITY_TEXT))
        return

    target = command_input.get(M_TARGET)
    if not target:
        _go_failure(session, ERR_NO_DESTINATION, "Where do you want to go?")
        return

    store = session.world.store
    destination = await store.find_place(target)
    if destination is None:
        _go_failure(session, ERR_DESTINATION_NOT_FOUND, "You can't go that way.")
        return

    here = await store.traverse(session.entity_id, IN)
    if not here:
        _go_failure(session, ERR_NOWHERE, "You are nowhere.")
        return
    if destination in here:
        _go_failure(session, ERR_ALREADY_THERE, "You are already there.")
        return

    await store.move_entity(session.entity_id, destination)
    logger.info("%s moved %s from %s to %s", session, session.entity_id, here, destination)

    looks = await store.get_looks(destination)
    name = looks[0].description if looks else destination
    result = await session.world.visibility.look(session.entity_id)
    session.send(CommandOutput.make(
        GO,
        f"You arrive at {name}.\n{result.text or NOTHING_VISIBLE_TEXT}",
        **{
            M_FROM: ",".join(here),
            M_TO: destination,
            M_ENTITIES: ",".join(result.entities),
        },
    ))


# --- wait ---

def _extract_wait(match: re.Match) -> dict[str, str]:
    argument = match.group(1)
    if argument is None:
        return {M_TIME: str(DEFAULT_WAIT)}
    if not _WAIT_ARGUMENT_RE.fullmatch(argument):
        raise ParseError(f"Cannot wait for '{argument}': expected a whole number of seconds")
    return {M_TIME: str(int(argument))}


async def handle_wait(session: Session, command_input: CommandInput) -> None:
    span = command_input.get_int(M_TIME, DEFAULT_WAIT)
    if span < 0:
        now = await session.world.state.get_time()
        text = NO_TIME_TRAVEL_TEXT
    else:
        now = await session.world.state.advance_time(span)
        text = f"You wait for {span}."
    session.send(CommandOutput.make(
        WAIT,
        text,
        **{M_TIME: str(span), M_NOW: str(now)},
    ))


# --- quit ---

async def handle_quit(session: Session, command_input: CommandInput) -> None:
    session.quit()


# --- help ---

async def handle_help(session: Session, command_input: CommandInput) -> None:
    lines = [
        f"{command.name} - {command.help}"
        for command in session.world.registry
        if command.help
    ]
    session.send(CommandOutput.make(HELP, "\n".join(lines)))


# --- fallbacks ---

async def handle_unknown(session: Session, command_input: CommandInput) -> None:
    text = command_input.text or ""
    session.send(CommandOutput.make(
        UNKNOWN_COMMAND,
        f"Unknown command: {text}",
        **{M_COMMAND: text},
    ))


async def handle_error(session: Session, command_input: CommandInput) -> None:
    error = command_input.error or ""
    session.send(CommandOutput.make(
        ERROR_COMMAND,
        f"Error: {error}",
        **{M_ERROR: error},
    ))


def register_builtin_commands(registry: CommandRegistry) -> CommandRegistry:
    registry.register(ECHO, handle_echo, help="Repeat the rest of the line back.") \
        .variant(ECHO, r"^echo\W*(.*)$", _extract_echo)
    registry.register(LOOK, handle_look, help="Describe what you can see from here.") \
        .variant(LOOK, r"^look$")
    go = registry.register(GO, handle_go, help="Travel to a place: go <place>.")
    go.variant(GO, r"^(?:go|move|travel)\s+(.+?)\s*$", _extract_go)
    go.variant("where", r"^(?:go|move|travel)$")
    registry.register(WAIT, handle_wait, help="Let time pass: wait [seconds].") \
        .variant(WAIT, r"^wait(?:\s+(.*?))?\s*$", _extract_wait)
    registry.register(QUIT, handle_quit, help="Leave the world.") \
        .variant(QUIT, r"^quit(\W+|$)")
    registry.register(HELP, handle_help, help="List the available commands.") \
        .variant(HELP, r"^help$")

    registry.register(UNKNOWN_COMMAND, handle_unknown)
    registry.register(ERROR_COMMAND, handle_error)
    return registry


def build_default_registry() -> CommandRegistry:
    return register_builtin_commands(CommandRegistry())
