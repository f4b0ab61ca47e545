from __future__ import annotations

import threading
from typing import Dict, List, Set

from topic_hub.core.connection import Connection
from topic_hub.core.topic.topic import Topic
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class TopicManager:
    """
    In-memory topic directory. Topics are created on first lookup and kept
    for the lifetime of the process; membership changes go through here.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Topic] = {}
        self._sessions: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    def get_topic(self, name: str) -> Topic:
        with self._lock:
            topic = self._topics.get(name)
            if topic is None:
                topic = Topic(name)
                self._topics[name] = topic
                logger.debug("Created topic %s", name)
            return topic

    def has_topic(self, name: str) -> bool:
        with self._lock:
            return name in self._topics

    def topics(self) -> List[Topic]:
        with self._lock:
            return list(self._topics.values())

    def subscribe(self, connection: Connection, name: str) -> Topic:
        with self._lock:
            topic = self.get_topic(name)
            topic.add(connection)
            self._sessions.setdefault(connection.session_id, set()).add(name)
            return topic

    def unsubscribe(self, connection: Connection, name: str) -> Topic:
        with self._lock:
            topic = self.get_topic(name)
            topic.remove(connection)
            names = self._sessions.get(connection.session_id)
            if names is not None:
                names.discard(name)
                if not names:
                    del self._sessions[connection.session_id]
            return topic

    def subscriptions(self, connection: Connection) -> Set[str]:
        with self._lock:
            return set(self._sessions.get(connection.session_id, ()))

    def remove_connection(self, connection: Connection) -> List[Topic]:
        """Drop a closed session from every topic it joined; returns those topics."""
        with self._lock:
            names = self._sessions.pop(connection.session_id, set())
            affected = []
            for name in sorted(names):
                topic = self._topics.get(name)
                if topic is not None:
                    topic.remove(connection)
                    affected.append(topic)
            if affected:
                logger.info("Session %s left %d topic(s)", connection.session_id, len(affected))
            return affected
