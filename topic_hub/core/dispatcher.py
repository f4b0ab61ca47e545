from __future__ import annotations

import inspect
import logging
from enum import StrEnum
from typing import Any, Iterable, Optional

from topic_hub.core.connection import Connection
from topic_hub.core.exceptions import FirewallRejection, HandlerNotFound
from topic_hub.core.observability.metrics import DISPATCH_COUNT
from topic_hub.core.periodic.periodic_timer import PeriodicTimerCoordinator
from topic_hub.core.registry import HandlerRegistry
from topic_hub.core.request import TopicRequest
from topic_hub.core.topic.handlers import PeriodicTimerAware, PeriodicTimerTopic, SecuredTopic, TopicHandler
from topic_hub.core.topic.topic import Topic
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)

CALLBACK_ERROR = "Websocket error processing topic callback function."
UNAUTHORIZED = "You are not authorized to perform this action."


class DispatchKind(StrEnum):
    SUBSCRIPTION = "subscription"
    UNSUBSCRIPTION = "unsubscription"
    PUBLICATION = "publication"
    PUSH = "push"


class TopicDispatcher:
    """
    Routes client subscribe/unsubscribe/publish events to the handler named
    by the request. Handler faults never escape: they are logged and reported
    to the client connection as a protocol error.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        periodic_timer: PeriodicTimerCoordinator,
        *,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._registry = registry
        self._periodic_timer = periodic_timer
        self.logger = log or logger

    async def on_subscribe(self, connection: Connection, topic: Topic, request: TopicRequest) -> bool:
        return await self.dispatch(DispatchKind.SUBSCRIPTION, connection, topic, request)

    async def on_unsubscribe(self, connection: Connection, topic: Topic, request: TopicRequest) -> bool:
        return await self.dispatch(DispatchKind.UNSUBSCRIPTION, connection, topic, request)

    async def on_publish(
        self,
        connection: Connection,
        topic: Topic,
        request: TopicRequest,
        event: Any,
        exclude: Iterable[str],
        eligible: Iterable[str],
    ) -> bool:
        return await self.dispatch(DispatchKind.PUBLICATION, connection, topic, request, event, exclude, eligible)

    async def dispatch(
        self,
        kind: DispatchKind,
        connection: Connection,
        topic: Topic,
        request: TopicRequest,
        payload: Any = None,
        exclude: Optional[Iterable[str]] = None,
        eligible: Optional[Iterable[str]] = None,
    ) -> bool:
        """Returns True when the handler callback ran to completion."""
        if kind not in (DispatchKind.SUBSCRIPTION, DispatchKind.UNSUBSCRIPTION, DispatchKind.PUBLICATION):
            raise ValueError(f"Cannot dispatch {kind} events to a client connection")

        try:
            handler = self._registry.get(request.handler_name)
        except HandlerNotFound as e:
            self.logger.error("%s", e)
            DISPATCH_COUNT.labels(kind, "missing_handler").inc()
            return False

        try:
            rejection = await self._check_access(handler, connection, topic, request, payload, exclude, eligible)
        except Exception as e:
            await self._report_error(handler, connection, topic, payload, e)
            DISPATCH_COUNT.labels(kind, "error").inc()
            return False

        if rejection is not None:
            await self._reject(connection, topic, request, rejection)
            DISPATCH_COUNT.labels(kind, "rejected").inc()
            return False

        try:
            await self._invoke(kind, handler, connection, topic, request, payload, exclude, eligible)
            await self._sync_periodic_timer(kind, handler, topic)
        except Exception as e:
            await self._report_error(handler, connection, topic, payload, e)
            DISPATCH_COUNT.labels(kind, "error").inc()
            return False

        DISPATCH_COUNT.labels(kind, "ok").inc()
        return True

    @staticmethod
    async def _check_access(
        handler: TopicHandler,
        connection: Connection,
        topic: Topic,
        request: TopicRequest,
        payload: Any,
        exclude: Optional[Iterable[str]],
        eligible: Optional[Iterable[str]],
    ) -> Optional[FirewallRejection]:
        if not isinstance(handler, SecuredTopic):
            return None
        try:
            verdict = await handler.secure(connection, topic, request, payload, exclude, eligible, None)
        except FirewallRejection as e:
            return e
        # anything other than a FirewallRejection grants access
        return verdict if isinstance(verdict, FirewallRejection) else None

    @staticmethod
    async def _invoke(
        kind: DispatchKind,
        handler: TopicHandler,
        connection: Connection,
        topic: Topic,
        request: TopicRequest,
        payload: Any,
        exclude: Optional[Iterable[str]],
        eligible: Optional[Iterable[str]],
    ) -> None:
        match kind:
            case DispatchKind.SUBSCRIPTION:
                await handler.on_subscribe(connection, topic, request)
            case DispatchKind.UNSUBSCRIPTION:
                await handler.on_unsubscribe(connection, topic, request)
            case DispatchKind.PUBLICATION:
                await handler.on_publish(connection, topic, request, payload, list(exclude or ()), list(eligible or ()))

    async def _sync_periodic_timer(self, kind: DispatchKind, handler: TopicHandler, topic: Topic) -> None:
        if kind == DispatchKind.PUBLICATION and isinstance(handler, PeriodicTimerTopic):
            if topic.count() >= 1 and not self._periodic_timer.is_registered(handler):
                if isinstance(handler, PeriodicTimerAware):
                    handler.set_periodic_timer(self._periodic_timer)
                result = handler.register_periodic_timer(topic)
                if inspect.isawaitable(result):
                    await result

        elif kind == DispatchKind.UNSUBSCRIPTION and topic.count() == 0:
            self._periodic_timer.clear(handler)

    async def _reject(self, connection: Connection, topic: Topic, request: TopicRequest, rejection: FirewallRejection) -> None:
        topic_id = topic.id
        self.logger.error("%s (handler=%s topic=%s)", rejection.reason, request.handler_name, topic_id)
        try:
            await connection.send_protocol_error(topic_id, UNAUTHORIZED, {"topic": topic_id, "reason": rejection.reason})
        except Exception as e:
            self.logger.warning("Could not report rejection to session %s: %s", getattr(connection, "session_id", None), e)
        try:
            await connection.close()
        except Exception as e:
            self.logger.warning("Could not close session %s: %s", getattr(connection, "session_id", None), e)

    async def _report_error(
        self,
        handler: TopicHandler,
        connection: Connection,
        topic: Topic,
        payload: Any,
        error: Exception,
    ) -> None:
        topic_id = topic.id
        self.logger.error(
            "%s Callback processing error in handler %s for topic %s: %s",
            CALLBACK_ERROR, handler.name, topic_id, error,
            exc_info=error,
        )
        try:
            await connection.send_protocol_error(
                topic_id,
                CALLBACK_ERROR,
                {"topic": topic_id, "handler": handler.name, "error": str(error), "event": payload},
            )
        except Exception as e:
            self.logger.warning("Could not report error to session %s: %s", getattr(connection, "session_id", None), e)
