from enum import Enum
from typing import Optional

from pydantic_settings import BaseSettings


class Environment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TESTING = "testing"


class Settings(BaseSettings):
    """Configuration settings for the AirWatch backend and client."""

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    DEFAULT_LOCATION: str = "Bengaluru Central"
    MAX_COMPARE_CITIES: int = 10

    # Reading store: "memory" or "sql"
    STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite:///airwatch.db"
    # "substring" (case-insensitive containment) or "exact" (case-insensitive equality)
    STORE_MATCH: str = "substring"
    # None keeps every reading for the life of the process
    STORE_MAX_READINGS: Optional[int] = None

    # Upstream providers; empty keys select the mock fallbacks
    OPENWEATHER_API_KEY: str = ""
    OPENWEATHER_BASE_URL: str = "https://api.openweathermap.org"
    OPENAI_API_KEY: str = ""
    CHAT_API_URL: str = "https://api.openai.com/v1/chat/completions"
    CHAT_MODEL: str = "gpt-4"
    UPSTREAM_TIMEOUT_SEC: float = 10.0

    # Realtime channel
    SIMULATION_ENABLED: bool = True
    SIMULATION_INTERVAL_SEC: float = 30.0
    SEND_TIMEOUT_SEC: float = 5.0
    SEND_QUEUE_MAX: int = 100

    # Stream client
    WS_URL: str = "ws://localhost:8000/ws"
    RECONNECT_DELAY_SEC: float = 5.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


def get_settings() -> Settings:
    """Get settings based on environment."""
    import os

    # Set environment-specific defaults
    env = os.getenv("AIRWATCH_ENV", "development").lower()

    if env == "production":
        return Settings(ENVIRONMENT=Environment.PRODUCTION, LOG_LEVEL="WARNING")
    elif env == "testing":
        return Settings(
            ENVIRONMENT=Environment.TESTING,
            API_PORT=8001,
            STORE_BACKEND="memory",
            DATABASE_URL="sqlite:///:memory:",
            SIMULATION_ENABLED=False,
            WS_URL="ws://localhost:8001/ws",
            LOG_LEVEL="DEBUG",
        )
    else:
        return Settings(ENVIRONMENT=Environment.DEVELOPMENT, LOG_LEVEL="DEBUG")
