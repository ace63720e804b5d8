"""Session: one user's conversation with the world.

A session is created active, may be bound to an entity, and ends in the
quit state. The transport supplies two functions: one awaiting the next line
(or ``CommandInput``) and one delivering outputs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Union

from core.messages import (
    M_ENTITY,
    O_CLIENT_QUIT,
    O_CONTROLLING_ENTITY,
    CommandInput,
    CommandOutput,
)

if TYPE_CHECKING:
    from world.game import World

logger = logging.getLogger(__name__)

# Returns the next raw line or a ready CommandInput; raises EOFError (or
# returns None) once the input stream is exhausted.
InputFunc = Callable[["Session"], Awaitable[Union[str, CommandInput, None]]]
# Receives (session, output, originating input, error).
OutputFunc = Callable[
    ["Session", CommandOutput, Union[CommandInput, None], Union[Exception, None]], None
]

FAREWELL_TEXT = "Goodbye."


class Session:
    """Per-connection state: liveness, bound entity, I/O boundary."""

    def __init__(
        self,
        world: World,
        input_func: InputFunc,
        output_func: OutputFunc,
        label: str = "?",
    ):
        self.world = world
        self.label = label
        self.alive = True
        self.entity_id: str | None = None
        # Set by the dispatcher while a handler runs for this session
        self.current_input: CommandInput | None = None
        self.current_error: Exception | None = None
        self._input_func = input_func
        self._output_func = output_func

    async def wait_for_input(self) -> str | CommandInput | None:
        return await self._input_func(self)

    def send(
        self,
        output: CommandOutput,
        command_input: CommandInput | None = None,
        error: Exception | None = None,
    ) -> None:
        """Deliver ``output``. Still works after the session has quit."""
        self._output_func(
            self,
            output,
            command_input if command_input is not None else self.current_input,
            error if error is not None else self.current_error,
        )

    def set_entity(self, entity_id: str) -> None:
        self.entity_id = entity_id
        self.send(CommandOutput.make(O_CONTROLLING_ENTITY, **{M_ENTITY: entity_id}))
        logger.info("%s is now controlling %s", self, entity_id)

    def quit(self) -> None:
        """Leave the world. Only the first call says goodbye."""
        if not self.alive:
            return
        self.send(CommandOutput.make(O_CLIENT_QUIT, FAREWELL_TEXT))
        self.alive = False
        logger.info("Disconnected %s", self)

    def __repr__(self) -> str:
        return f"Session#{self.label}"
