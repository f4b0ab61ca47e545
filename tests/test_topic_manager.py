import pytest

from topic_hub.core.topic.topic import Topic
from topic_hub.core.topic.topic_manager import TopicManager

from tests.fakes import FakeConnection


def test_get_topic_creates_once():
    topics = TopicManager()

    first = topics.get_topic("chat.lobby")

    assert topics.get_topic("chat.lobby") is first
    assert topics.has_topic("chat.lobby")
    assert not topics.has_topic("chat.other")


def test_subscribe_and_unsubscribe_track_counts():
    topics = TopicManager()
    alice, bob = FakeConnection("alice"), FakeConnection("bob")

    topics.subscribe(alice, "chat.lobby")
    topic = topics.subscribe(bob, "chat.lobby")
    assert topic.count() == 2
    assert len(topic) == 2
    assert topic.has(alice)

    topic = topics.unsubscribe(alice, "chat.lobby")
    assert topic.count() == 1
    assert [c.session_id for c in topic] == ["bob"]
    assert topics.subscriptions(alice) == set()


def test_remove_connection_leaves_every_topic():
    topics = TopicManager()
    alice, bob = FakeConnection("alice"), FakeConnection("bob")
    topics.subscribe(alice, "a")
    topics.subscribe(alice, "b")
    topics.subscribe(bob, "b")

    affected = topics.remove_connection(alice)

    assert [t.id for t in affected] == ["a", "b"]
    assert topics.get_topic("a").count() == 0
    assert topics.get_topic("b").count() == 1
    assert topics.remove_connection(alice) == []


@pytest.mark.asyncio
async def test_broadcast_honours_exclude_and_eligible():
    topic = Topic("chat.lobby")
    alice, bob, carol = FakeConnection("alice"), FakeConnection("bob"), FakeConnection("carol")
    for conn in (alice, bob, carol):
        topic.add(conn)

    assert await topic.broadcast({"msg": "hi"}, exclude=["alice"]) == 2
    assert alice.events == []
    assert bob.events == [("chat.lobby", {"msg": "hi"})]

    assert await topic.broadcast("only carol", eligible=["carol"]) == 1
    assert carol.events[-1] == ("chat.lobby", "only carol")
    assert bob.events[-1] == ("chat.lobby", {"msg": "hi"})


@pytest.mark.asyncio
async def test_broadcast_keeps_going_when_one_subscriber_fails():
    topic = Topic("chat.lobby")
    broken, ok = FakeConnection("broken", fail_events=True), FakeConnection("ok")
    topic.add(broken)
    topic.add(ok)

    delivered = await topic.broadcast("hello")

    assert delivered == 1
    assert ok.events == [("chat.lobby", "hello")]
