import pytest

from topic_hub.core.request import TopicRequest

from tests.fakes import FakeConnection


@pytest.fixture
def request_():
    return TopicRequest(topic_name="hello.world", handler_name="topic.handler", attributes={"room": "lobby"})


@pytest.fixture
def connection():
    return FakeConnection()
