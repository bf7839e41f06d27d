"""
DishManager Client — Configuration
===================================

Loaded from environment variables prefixed with DISHMANAGER_ (or a .env file):

    DISHMANAGER_API_URL             REST base URL       (http://localhost:5000/api)
    DISHMANAGER_SOCKET_URL          Socket.IO endpoint  (http://localhost:5000)
    DISHMANAGER_RECONNECT_ATTEMPTS  Bounded attempts per (re)connect
    DISHMANAGER_RECONNECT_DELAY     Fixed delay between attempts, seconds
    DISHMANAGER_REQUEST_TIMEOUT     HTTP timeout, seconds
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    api_url: str = Field(default="http://localhost:5000/api")
    socket_url: str = Field(default="http://localhost:5000")
    reconnect_attempts: int = Field(default=5, ge=1)
    reconnect_delay: float = Field(default=1.0, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="DISHMANAGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
