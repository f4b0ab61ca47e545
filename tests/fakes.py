from typing import Any, Dict, List, Optional


class FakeConnection:
    def __init__(self, session_id: str = "session-1", fail_events: bool = False, fail_close: bool = False):
        self.session_id = session_id
        self.fail_events = fail_events
        self.fail_close = fail_close
        self.events: List[tuple] = []
        self.errors: List[tuple] = []
        self.closed = 0

    async def event(self, topic_id: str, payload: Any) -> None:
        if self.fail_events:
            raise ConnectionError("socket gone")
        self.events.append((topic_id, payload))

    async def send_protocol_error(self, topic_id: str, description: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.errors.append((topic_id, description, details))

    async def close(self) -> None:
        self.closed += 1
        if self.fail_close:
            raise ConnectionError("socket already closed")


class RecordingHandler:
    """Implements only the mandatory callbacks and records every call."""

    def __init__(self, name: str = "topic.handler"):
        self.name = name
        self.calls: List[str] = []

    async def on_subscribe(self, connection, topic, request) -> None:
        self.calls.append("on_subscribe")

    async def on_unsubscribe(self, connection, topic, request) -> None:
        self.calls.append("on_unsubscribe")

    async def on_publish(self, connection, topic, request, event, exclude, eligible) -> None:
        self.calls.append("on_publish")

