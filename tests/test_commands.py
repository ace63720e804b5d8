import pytest

from core.errors import StorageError
from store.entities import IN
from tests.helpers import Recorder, never_ready
from world.session import Session


@pytest.fixture
async def session(world, recorder):
    s = await world.register_session(never_ready, recorder)
    recorder.outputs.clear()
    return s


async def test_echo(world, session, recorder):
    await world.handle(session, "echo Hello World")

    [output] = recorder.outputs
    assert output.output == "echo"
    assert output.text == "hello world"


async def test_wait_reports_time_and_advances_clock(world, session, recorder):
    await world.handle(session, "wait 5")
    await world.handle(session, "wait")

    first, second = recorder.of("wait")
    assert first["time"] == "5"
    assert first["now"] == "5"
    assert first.text == "You wait for 5."
    assert second["time"] == "1"
    assert second["now"] == "6"
    assert await world.state.get_time() == 6


async def test_negative_wait_keeps_its_time_but_not_the_clock(world, session, recorder):
    await world.handle(session, "wait 4")
    await world.handle(session, "wait -2")

    [_, backwards] = recorder.of("wait")
    assert backwards["time"] == "-2"
    assert backwards["now"] == "4"
    assert backwards.text == "Time does not run backwards."
    assert await world.state.get_time() == 4


async def test_bad_wait_is_an_error(world, session, recorder):
    await world.handle(session, "wait forever")

    [output] = recorder.outputs
    assert output.output == "errorcommand"
    assert output.text.startswith("Error: ")
    assert await world.state.get_time() == 0


async def test_unknown_command(world, session, recorder):
    await world.handle(session, "dance")

    [output] = recorder.outputs
    assert output.output == "unknowncommand"
    assert output.text == "Unknown command: dance"


async def test_help_lists_commands(world, session, recorder):
    await world.handle(session, "help")

    [output] = recorder.outputs
    lines = output.text.splitlines()
    assert [line.split(" - ")[0] for line in lines] == ["echo", "look", "go", "wait", "quit", "help"]


async def test_quit(world, session, recorder):
    await world.handle(session, "quit")
    await world.handle(session, "quit")

    assert recorder.tags() == ["clientquit"]
    assert not session.alive
    assert not world.any_alive()


async def test_look_sees_the_other_actor_not_itself(world):
    place = await world.state.get_start_place()
    alice = await world.store.create_actor("a tall woman in a green cloak")
    bob = await world.store.create_actor("a short man with a lute")
    await world.store.add_relationship(alice, place, IN)
    await world.store.add_relationship(bob, place, IN)

    alice_out = Recorder()
    alice_session = await world.register_session(never_ready, alice_out, entity_id=alice)
    await world.register_session(never_ready, Recorder(), entity_id=bob)

    await world.handle(alice_session, "look")

    [look] = alice_out.of("look")
    assert "a short man with a lute" in look.text
    assert "a tall woman in a green cloak" not in look.text
    assert bob in look["entities"].split(",")


async def test_look_alone(world, session, recorder):
    await world.handle(session, "look")

    [output] = recorder.outputs
    assert output.output == "look"
    assert output.text == "You see nothing of interest."
    assert output["entities"] == ""


async def test_look_without_entity(world, recorder):
    session = Session(world, never_ready, recorder)

    await world.handle(session, "look")

    assert recorder.tags() == ["noentity"]


async def test_storage_failure_reaches_only_the_issuing_session(world, monkeypatch):
    first_out, second_out = Recorder(), Recorder()
    first = await world.register_session(never_ready, first_out)
    second = await world.register_session(never_ready, second_out)

    async def broken_look(actor_id):
        raise StorageError("database is locked")

    monkeypatch.setattr(world.visibility, "look", broken_look)
    await world.handle(first, "look")
    monkeypatch.undo()
    await world.handle(second, "look")

    assert first_out.tags()[-1] == "errorcommand"
    assert first_out.outputs[-1].error == "database is locked"
    assert second_out.tags()[-1] == "look"
    assert "errorcommand" not in second_out.tags()


async def test_go_moves_the_actor_and_look_follows(world, session, recorder):
    start = await world.state.get_start_place()
    cave = await world.store.create_place("a dark cave")
    hermit = await world.store.create_actor("an old hermit")
    goat = await world.store.create_actor("a mountain goat")
    await world.store.add_relationship(hermit, cave, IN)
    await world.store.add_relationship(goat, start, IN)

    await world.handle(session, "go A Dark Cave")
    await world.handle(session, "look")

    [go] = recorder.of("go")
    assert go.error is None
    assert go["from"] == start
    assert go["to"] == cave
    assert go.text.startswith("You arrive at a dark cave.\n")
    assert "an old hermit" in go.text
    [look] = recorder.of("look")
    assert "an old hermit" in look.text
    assert "a mountain goat" not in look.text
    assert await world.store.traverse(session.entity_id, IN) == [cave]

    history = [
        r for r in await world.store.relationships_of(session.entity_id, include_dead=True)
        if r.verb == IN
    ]
    assert [(r.receiver_id, r.alive) for r in history] == [(start, False), (cave, True)]


async def test_go_back_by_place_id(world, session, recorder):
    start = await world.state.get_start_place()
    cave = await world.store.create_place("a dark cave")

    await world.handle(session, "move a dark cave")
    await world.handle(session, f"travel {start}")

    there, back = recorder.of("go")
    assert there["to"] == cave
    assert (back["from"], back["to"]) == (cave, start)
    assert await world.store.traverse(session.entity_id, IN) == [start]
    assert len(await world.store.relationships_of(session.entity_id, include_dead=True)) == 3


@pytest.mark.parametrize("text, error", [
    ("go", "no_destination"),
    ("go nowhere-land", "destination_not_found"),
    ("go a quiet clearing", "already_there"),
])
async def test_go_failures_leave_the_actor_in_place(world, session, recorder, text, error):
    start = await world.state.get_start_place()

    await world.handle(session, text)

    [output] = recorder.outputs
    assert output.output == "go"
    assert output.error == error
    assert await world.store.traverse(session.entity_id, IN) == [start]
    assert len(await world.store.relationships_of(session.entity_id, include_dead=True)) == 1


async def test_go_from_nowhere(world, recorder):
    await world.store.create_place("a dark cave")
    drifter = await world.store.create_actor("a drifter")
    session = await world.register_session(never_ready, recorder, entity_id=drifter)
    recorder.outputs.clear()

    await world.handle(session, "go a dark cave")

    [output] = recorder.outputs
    assert output.error == "nowhere"
    assert await world.store.traverse(drifter, IN) == []


async def test_go_without_entity(world, recorder):
    await world.store.create_place("a dark cave")
    session = Session(world, never_ready, recorder)

    await world.handle(session, "go a dark cave")

    assert recorder.tags() == ["noentity"]
