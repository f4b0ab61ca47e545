import asyncio
from typing import Optional

from topic_hub.core.push.gateway import PushGateway
from topic_hub.dal.push_store import RedisPushStore
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class PushSubscriber:
    """Feeds push messages from the Redis channel into the push gateway."""

    def __init__(self, store: RedisPushStore, gateway: PushGateway):
        self._store = store
        self._gateway = gateway
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run(), name="push-subscriber")

    async def stop(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _run(self):
        backoff = 0.5
        while True:
            try:
                async for message in self._store.subscribe_events():
                    try:
                        await self._gateway.push_message(message)
                    except Exception as e:
                        logger.warning("push to %s via %s failed: %s", message.topic, message.handler, e)
                backoff = 0.5  # reset if stream ended cleanly
                await asyncio.sleep(backoff)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning("push subscribe error: %s; retrying in %.1fs", e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 10.0)
