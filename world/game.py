"""World owns the store connection, the command pipeline and all sessions."""

from __future__ import annotations

import logging

from commands.builtin import build_default_registry
from commands.dispatcher import Dispatcher
from commands.interpreter import TextInterpreter
from commands.registry import CommandRegistry
from config.settings import Settings
from core.errors import DispatchError
from core.messages import O_WELCOME, O_WORLD_SHUTDOWN, CommandInput, CommandOutput
from store.database import Database
from store.entities import IN, EntityStore, VerbPairs
from store.schema import MigrationOutcome
from store.subsystems import build_subsystem_manager
from store.visibility import VisibilityResolver
from store.world_state import WorldState
from world.loop import WorldLoop
from world.session import InputFunc, OutputFunc, Session

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome."
SHUTDOWN_TEXT = "Farewell."


class World:
    """Top-level owner of world state.

    Construction only wires configuration together; ``start()`` opens the
    database and migrates it. Any startup failure is fatal and leaves the
    world unusable.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: CommandRegistry | None = None,
        verbs: VerbPairs | None = None,
    ):
        self.settings = settings or Settings()
        self.registry = registry or build_default_registry()
        self.verbs = verbs or VerbPairs()
        self.interpreter = TextInterpreter(self.registry)
        self.dispatcher = Dispatcher(self.registry)
        self.loop = WorldLoop(self)

        self.db: Database | None = None
        self.store: EntityStore | None = None
        self.visibility: VisibilityResolver | None = None
        self.state: WorldState | None = None
        self.migrations: list[MigrationOutcome] = []

        self.sessions: list[Session] = []
        self._session_counter = 0

    @property
    def started(self) -> bool:
        return self.db is not None

    async def start(self) -> None:
        """Open storage, run every subsystem migration, seed the start place."""
        db = await Database.open(self.settings.DB_PATH)
        try:
            migrations = await build_subsystem_manager(db).initialize()
            store = EntityStore(db, self.verbs)
            state = WorldState(db)
            await self._ensure_start_place(store, state)
        except BaseException:
            await db.close()
            raise

        self.db = db
        self.store = store
        self.state = state
        self.visibility = VisibilityResolver(store)
        self.migrations = migrations
        logger.info("World started (%d subsystems)", len(migrations))

    async def stop(self) -> None:
        """Release the database connection."""
        if self.db is None:
            return
        await self.db.close()
        self.db = None
        logger.info("World stopped")

    async def _ensure_start_place(self, store: EntityStore, state: WorldState) -> None:
        place_id = await state.get_start_place()
        if place_id is not None and await store.entity_exists(place_id):
            return
        place_id = await store.create_place(self.settings.START_PLACE_DESCRIPTION)
        await state.set_start_place(place_id)
        logger.info("Created start place %s", place_id)

    # --- Sessions ---

    async def register_session(
        self,
        input_func: InputFunc,
        output_func: OutputFunc,
        entity_id: str | None = None,
    ) -> Session:
        """Welcome a new session and bind it to an entity.

        ``entity_id`` binds an existing entity; otherwise a fresh avatar is
        created in the start place.
        """
        if not self.started:
            raise RuntimeError("World.start() must be called before registering sessions")

        self._session_counter += 1
        session = Session(self, input_func, output_func, label=str(self._session_counter))
        self.sessions.append(session)
        logger.info("Registering %s", session)
        session.send(CommandOutput.make(O_WELCOME, WELCOME_TEXT))

        if entity_id is not None and not await self.store.entity_exists(entity_id):
            logger.warning("%s asked for unknown entity %s, creating an avatar", session, entity_id)
            entity_id = None
        if entity_id is None:
            entity_id = await self._create_avatar()
        session.set_entity(entity_id)

        self.loop.attach(session)
        return session

    async def _create_avatar(self) -> str:
        async with self.db.transaction():
            actor_id = await self.store.create_actor(self.settings.AVATAR_DESCRIPTION)
            place_id = await self.state.get_start_place()
            await self.store.add_relationship(actor_id, place_id, IN)
        return actor_id

    def live_sessions(self) -> list[Session]:
        return [s for s in self.sessions if s.alive]

    def any_alive(self) -> bool:
        return any(s.alive for s in self.sessions)

    def broadcast_shutdown(self) -> None:
        for session in self.sessions:
            session.send(CommandOutput.make(O_WORLD_SHUTDOWN, SHUTDOWN_TEXT))

    # --- Commands ---

    async def handle(self, session: Session, raw: str | CommandInput) -> None:
        """Interpret (if needed) and dispatch one input for ``session``.

        Failures inside a handler stay with the issuing session.
        """
        command_input = raw if isinstance(raw, CommandInput) else self.interpreter.interpret(raw)
        logger.debug("%s -> %s", session, command_input.to_pretty_string())
        try:
            await self.dispatcher.dispatch(session, command_input)
        except DispatchError:
            raise
        except Exception as e:
            logger.exception("Command %s failed for %s", command_input.get("command"), session)
            await self.dispatcher.report_error(session, command_input, e)

    async def run(self) -> None:
        if not self.started:
            raise RuntimeError("Tried to run the world without calling start() first")
        await self.loop.run()
