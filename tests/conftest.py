import pytest

from config.settings import Settings
from store.database import MEMORY_DB, Database
from store.entities import EntityStore
from store.subsystems import build_subsystem_manager
from tests.helpers import Recorder
from world.game import World


@pytest.fixture
def settings():
    return Settings(DB_PATH=MEMORY_DB, _env_file=None)


@pytest.fixture
async def db():
    database = await Database.open(MEMORY_DB)
    yield database
    await database.close()


@pytest.fixture
async def store(db):
    await build_subsystem_manager(db).initialize()
    return EntityStore(db)


@pytest.fixture
async def world(settings):
    w = World(settings=settings)
    await w.start()
    yield w
    await w.stop()


@pytest.fixture
def recorder():
    return Recorder()
