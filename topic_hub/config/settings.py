from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Topic Hub"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: Optional[str] = Field(default=None)
    PORT: int = Field(default=8080)

    # Redis
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    PUSH_CHANNEL: str = Field(default="topic_hub:push:events")

    # Periodic timers
    TIMEZONE: str = Field(default="UTC")
    TIMER_MISFIRE_GRACE_TIME: int = Field(default=30)

    # Handlers, as "package.module:attribute"
    TOPIC_HANDLERS: List[str] = Field(default_factory=list)

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
