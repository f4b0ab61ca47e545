from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator

from topic_hub.core.connection import Connection
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class Topic:
    """A named channel and the connections currently subscribed to it."""

    def __init__(self, topic_id: str) -> None:
        self._id = topic_id
        self._subscribers: Dict[str, Connection] = {}

    @property
    def id(self) -> str:
        return self._id

    def count(self) -> int:
        return len(self._subscribers)

    def __len__(self) -> int:
        return len(self._subscribers)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._subscribers.values()))

    def __repr__(self) -> str:
        return f"Topic(id={self._id!r}, subscribers={len(self._subscribers)})"

    def has(self, connection: Connection) -> bool:
        return connection.session_id in self._subscribers

    def add(self, connection: Connection) -> None:
        self._subscribers[connection.session_id] = connection

    def remove(self, connection: Connection) -> None:
        self._subscribers.pop(connection.session_id, None)

    async def broadcast(self, payload: Any, exclude: Iterable[str] = (), eligible: Iterable[str] = ()) -> int:
        """
        Send ``payload`` to subscribers. Sessions in ``exclude`` are skipped;
        a non-empty ``eligible`` restricts delivery to the sessions it lists.
        """
        excluded = set(exclude or ())
        allowed = set(eligible or ())
        delivered = 0
        for conn in self:
            if conn.session_id in excluded:
                continue
            if allowed and conn.session_id not in allowed:
                continue
            try:
                await conn.event(self._id, payload)
                delivered += 1
            except Exception as e:
                logger.warning("Broadcast to session %s on topic %s failed: %s", conn.session_id, self._id, e)
        return delivered
