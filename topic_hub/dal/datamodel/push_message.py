import time
from typing import Any, Dict

from pydantic import BaseModel, Field


class PushMessage(BaseModel):
    topic: str
    handler: str
    data: Any = None
    provider: str = "redis"
    attributes: Dict[str, Any] = Field(default_factory=dict)
    created_ts: float = Field(default_factory=time.time)
