from store.entities import CONTAINS, IN, LOOK_BASIC
from store.visibility import VisibilityResolver


async def test_actor_sees_others_in_its_place(store):
    place = await store.create_place("a meadow")
    me = await store.create_actor("me")
    bob = await store.create_actor("bob")
    rock = await store.create_actor("a mossy rock")
    elsewhere = await store.create_actor("a distant tower")
    for entity in (me, bob, rock):
        await store.add_relationship(entity, place, IN)

    result = await VisibilityResolver(store).look(me)

    assert result.entities == [bob, rock]
    assert result.text == "bob\na mossy rock"
    assert me not in result.breakdown
    assert elsewhere not in result.entities


async def test_actor_sees_what_it_carries(store):
    place = await store.create_place()
    me = await store.create_actor("me")
    await store.add_relationship(me, place, IN)
    lantern = await store.create_entity()
    await store.add_look(lantern, LOOK_BASIC, "a lantern")
    await store.add_relationship(me, lantern, CONTAINS)

    assert await VisibilityResolver(store).visible_entities(me) == [lantern]


async def test_removed_entities_disappear(store):
    place = await store.create_place()
    me = await store.create_actor("me")
    bob = await store.create_actor("bob")
    await store.add_relationship(me, place, IN)
    bob_in = await store.add_relationship(bob, place, IN)

    await store.remove_relationship(bob_in)

    assert await VisibilityResolver(store).visible_entities(me) == []


async def test_actor_nowhere_sees_nothing(store):
    me = await store.create_actor("me")

    result = await VisibilityResolver(store).look(me)

    assert result.entities == []
    assert result.text == ""


async def test_entity_reached_twice_is_listed_once(store):
    place = await store.create_place()
    me = await store.create_actor("me")
    cat = await store.create_actor("a cat")
    await store.add_relationship(me, place, IN)
    await store.add_relationship(cat, place, IN)
    await store.add_relationship(me, cat, CONTAINS)

    assert await VisibilityResolver(store).visible_entities(me) == [cat]
