"""Application configuration from environment variables."""

import logging
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AppConfig(BaseSettings):
    """Server configuration loaded from environment variables.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if present)
    """

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite+aiosqlite:///./rentledger.db"
    log_file: str = "logs/server.log"

    # AI analysis (Ollama); disabled analysis always returns the fallback text
    llm_enabled: bool = True
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "qwen2.5:latest"

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]


_app_config_instance: Optional[AppConfig] = None


def get_app_config() -> AppConfig:
    """Get or create the config instance (lazy, after .env is loaded)."""
    global _app_config_instance
    if _app_config_instance is None:
        _app_config_instance = AppConfig()
    return _app_config_instance


def reset_app_config() -> None:
    """Drop the cached instance so the next call re-reads the environment."""
    global _app_config_instance
    _app_config_instance = None


__all__ = ["AppConfig", "get_app_config", "reset_app_config"]
