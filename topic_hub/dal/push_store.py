from __future__ import annotations

from typing import AsyncIterator, Optional

import redis.asyncio as redis

from topic_hub.config.settings import settings
from topic_hub.dal.datamodel.push_message import PushMessage
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class RedisPushStore:
    def __init__(self, redis_url: Optional[str] = None, channel: Optional[str] = None):
        self._redis = redis.from_url(redis_url or settings.REDIS_URL, decode_responses=True)
        self._channel = channel or settings.PUSH_CHANNEL

    @property
    def client(self) -> redis.Redis:
        return self._redis

    @property
    def channel(self) -> str:
        return self._channel

    # ---------- Pub/Sub ----------

    async def publish(self, message: PushMessage) -> int:
        return await self._redis.publish(self._channel, message.model_dump_json())

    async def subscribe_events(self) -> AsyncIterator[PushMessage]:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for msg in pubsub.listen():
                if msg.get("type") != "message":
                    continue
                data = msg.get("data")
                if isinstance(data, (bytes, bytearray)):
                    data = data.decode()
                try:
                    yield PushMessage.model_validate_json(data)
                except ValueError as e:
                    logger.debug("Skipping malformed push payload: %s", e)
                    continue
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()

    async def close(self) -> None:
        await self._redis.aclose()
