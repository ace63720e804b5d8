"""Routes a ``CommandInput`` to its command's handler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from commands.registry import CommandRegistry
from core.errors import DispatchError, StorageError
from core.messages import ERROR_COMMAND, M_COMMAND, M_ERROR, CommandInput

if TYPE_CHECKING:
    from world.session import Session

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    async def dispatch(self, session: Session, command_input: CommandInput) -> None:
        """Run the handler for ``command_input`` on behalf of ``session``.

        Storage failures are reported to the session as ``errorcommand``.
        An unregistered command name is a bug and raises ``DispatchError``.
        """
        command = self.registry.get(command_input.get(M_COMMAND, ""))
        if command is None:
            raise DispatchError(f"No handler registered for {command_input.to_pretty_string()}")

        previous = session.current_input
        session.current_input = command_input
        try:
            await command.handler(session, command_input)
        except StorageError as e:
            logger.error("Storage error while running %s for %s: %s", command.name, session, e)
            await self._report(session, command_input, e)
        finally:
            session.current_input = previous

    async def report_error(
        self,
        session: Session,
        command_input: CommandInput,
        error: Exception,
    ) -> None:
        """Deliver ``error`` to the session through the ``errorcommand`` handler."""
        previous = session.current_input
        session.current_input = command_input
        try:
            await self._report(session, command_input, error)
        finally:
            session.current_input = previous

    async def _report(self, session: Session, command_input: CommandInput, error: Exception) -> None:
        handler = self.registry.get(ERROR_COMMAND)
        if handler is None:
            raise DispatchError(f"No {ERROR_COMMAND} handler registered") from error
        session.current_error = error
        try:
            await handler.handler(session, CommandInput.make(ERROR_COMMAND, **{M_ERROR: str(error)}))
        finally:
            session.current_error = None
