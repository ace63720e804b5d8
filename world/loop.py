"""WorldLoop: the single dispatch task driving the world.

Input arrival is decoupled from dispatch: every live session gets a reader
task that awaits its next line and hands it to a shared ``asyncio.Queue``.
Only the loop itself takes items off the queue, so store mutations never run
concurrently. A reader waits until its item has been processed before
reading again, which keeps per-session ordering and stops it from reading
past a ``quit``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Tuple, Union

from core.messages import CommandInput

if TYPE_CHECKING:
    from world.game import World
    from world.session import Session

logger = logging.getLogger(__name__)

# (session, raw line / input or None when the stream is exhausted, processed signal)
Inbound = Tuple["Session", Union[str, CommandInput, None], asyncio.Future]


class WorldLoop:
    """Pulls input from every live session, interprets and dispatches it."""

    def __init__(self, world: World):
        self.world = world
        self._inbound: asyncio.Queue[Optional[Inbound]] | None = None
        self._readers: dict[Session, asyncio.Task] = {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def attach(self, session: Session) -> None:
        """Start polling ``session``. No-op until the loop runs."""
        if not self._running or not session.alive or session in self._readers:
            return
        self._readers[session] = asyncio.create_task(
            self._read(session), name=f"reader-{session.label}",
        )

    async def run(self) -> None:
        """Run until no session is left alive (or ``stop()`` is called)."""
        if self._running:
            raise RuntimeError("World loop is already running")

        self._inbound = asyncio.Queue()
        self._running = True
        logger.info("Looping with %d sessions", len(self.world.live_sessions()))

        try:
            for session in self.world.live_sessions():
                self.attach(session)

            while self._running and self.world.any_alive():
                item = await self._inbound.get()
                if item is None:
                    break
                await self._process(item)
        finally:
            self._running = False
            await self._cancel_readers()

        self.world.broadcast_shutdown()
        logger.info("No sessions left alive, world loop stopped")

    def stop(self) -> None:
        """Quit every live session and end the loop after the current item."""
        if not self._running:
            return
        for session in self.world.live_sessions():
            session.quit()
        self._running = False
        self._inbound.put_nowait(None)

    async def _process(self, item: Inbound) -> None:
        session, raw, done = item
        try:
            if not session.alive:
                logger.debug("Dropping input for %s, already quit", session)
            elif raw is None:
                session.quit()
            else:
                await self.world.handle(session, raw)
        finally:
            if not done.done():
                done.set_result(None)

    async def _read(self, session: Session) -> None:
        while session.alive:
            try:
                raw = await session.wait_for_input()
            except EOFError:
                raw = None
            except Exception:
                logger.exception("Input failed for %s", session)
                raw = None

            done = asyncio.get_running_loop().create_future()
            await self._inbound.put((session, raw, done))
            await done
            if raw is None:
                break
        self._readers.pop(session, None)

    async def _cancel_readers(self) -> None:
        tasks = list(self._readers.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._readers.clear()
