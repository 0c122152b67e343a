from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The API token itself is not a setting: it is read from
    ``token_env_var`` at every call so that it can change at runtime.
    """

    # Bunnyshell REST API
    bunnyshell_api_url: str = "https://api.bunnyshell.com/v1"
    auth_header: str = "X-Auth-Token"
    auth_scheme: str = ""

    # Bunnyshell CLI
    bns_binary: str = "bns"

    # Credentials
    token_env_var: str = "BNS_API_KEY"

    # Execution
    request_timeout_seconds: float = 5.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    retry_statuses: List[int] = []

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    logger.info(f"Settings loaded - Bunnyshell API URL: {settings.bunnyshell_api_url}")
    logger.info(
        f"Settings loaded - timeout {settings.request_timeout_seconds}s, "
        f"{settings.max_retries} retries, base delay {settings.retry_delay_seconds}s"
    )
    return settings
