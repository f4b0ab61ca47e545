from __future__ import annotations

import logging
from typing import Any, Optional

from topic_hub.core.exceptions import HandlerNotFound, PushUnsupported
from topic_hub.core.observability.metrics import PUSH_COUNT
from topic_hub.core.registry import HandlerRegistry
from topic_hub.core.request import TopicRequest
from topic_hub.core.topic.handlers import PushableTopic
from topic_hub.core.topic.topic_manager import TopicManager
from topic_hub.dal.datamodel.push_message import PushMessage
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class PushGateway:
    """
    Entry point for server-originated events. There is no client connection
    here, so nothing is gated and every failure propagates to the caller.
    """

    def __init__(self, registry: HandlerRegistry, topics: TopicManager, *, log: Optional[logging.Logger] = None) -> None:
        self._registry = registry
        self._topics = topics
        self.logger = log or logger

    async def push(self, request: TopicRequest, payload: Any, provider: str) -> None:
        topic = self._topics.get_topic(request.topic_name)

        try:
            handler = self._registry.get(request.handler_name)
        except HandlerNotFound as e:
            self.logger.error("%s", e)
            PUSH_COUNT.labels("missing_handler").inc()
            raise

        if not isinstance(handler, PushableTopic):
            PUSH_COUNT.labels("unsupported").inc()
            raise PushUnsupported(handler.name)

        try:
            await handler.on_push(topic, request, payload, provider)
        except Exception:
            PUSH_COUNT.labels("error").inc()
            raise
        PUSH_COUNT.labels("ok").inc()

    async def push_message(self, message: PushMessage) -> None:
        request = TopicRequest(topic_name=message.topic, handler_name=message.handler, attributes=message.attributes)
        await self.push(request, message.data, message.provider)
