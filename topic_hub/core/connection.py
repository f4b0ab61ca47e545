from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """A single client session as seen by the dispatch core."""

    session_id: str

    async def event(self, topic_id: str, payload: Any) -> None:
        """Deliver a published event to the client."""
        ...

    async def send_protocol_error(self, topic_id: str, description: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Report a protocol-level error for ``topic_id`` to the client."""
        ...

    async def close(self) -> None:
        ...
