from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, Union, runtime_checkable

from topic_hub.core.connection import Connection
from topic_hub.core.exceptions import FirewallRejection
from topic_hub.core.request import TopicRequest
from topic_hub.core.topic.topic import Topic

if TYPE_CHECKING:  # pragma: no cover - typing only
    from topic_hub.core.periodic.periodic_timer import PeriodicTimerCoordinator


@runtime_checkable
class TopicHandler(Protocol):
    """Business logic bound to a topic. The three callbacks are mandatory."""

    name: str

    async def on_subscribe(self, connection: Connection, topic: Topic, request: TopicRequest) -> None:
        ...

    async def on_unsubscribe(self, connection: Connection, topic: Topic, request: TopicRequest) -> None:
        ...

    async def on_publish(
        self,
        connection: Connection,
        topic: Topic,
        request: TopicRequest,
        event: Any,
        exclude: Iterable[str],
        eligible: Iterable[str],
    ) -> None:
        ...


@runtime_checkable
class SecuredTopic(Protocol):
    async def secure(
        self,
        connection: Optional[Connection],
        topic: Topic,
        request: TopicRequest,
        payload: Any = None,
        exclude: Optional[Iterable[str]] = None,
        eligible: Optional[Iterable[str]] = None,
        provider: Optional[str] = None,
    ) -> Union[None, FirewallRejection]:
        """Return (or raise) a FirewallRejection to refuse access, None to allow."""
        ...


@runtime_checkable
class PushableTopic(Protocol):
    async def on_push(self, topic: Topic, request: TopicRequest, data: Any, provider: str) -> None:
        ...


@runtime_checkable
class PeriodicTimerTopic(Protocol):
    def register_periodic_timer(self, topic: Topic) -> None:
        """May be a plain method or a coroutine; the dispatcher awaits the latter."""
        ...


@runtime_checkable
class PeriodicTimerAware(Protocol):
    def set_periodic_timer(self, periodic_timer: "PeriodicTimerCoordinator") -> None:
        ...
