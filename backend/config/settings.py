from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - docker-compose.yml environment section
    - .env file (for secrets like the TronGrid API key)
    - System environment

    Variable names follow the deployment conventions:
    - BACKEND_API_URL (notice backend, serves /api/notices/server/{address})
    - TRON_FULL_HOST, TRON_API_KEY, NOTICE_CONTRACT_ADDRESS (chain access)
    - REDIS_URL (optional, publishes verification events)
    """

    # Logging
    log_level: str = "INFO"

    # Notice backend
    backend_api_url: str = ""
    backend_request_timeout: float = 10.0
    backend_notice_limit: int = 100

    # TRON (TronGrid HTTP API)
    tron_full_host: str = "https://nile.trongrid.io"
    tron_api_key: Optional[str] = None
    notice_contract_address: str = ""
    tron_request_timeout: float = 10.0

    # Blockchain scan
    max_notice_id: int = 20
    scan_query_delay: float = 0.2

    # Verification scheduler
    verification_delay: float = 2.0
    verification_queue_size: int = 100

    # Redis (optional)
    redis_url: Optional[str] = None
    verification_channel: str = "notices:verified"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('backend_api_url', 'tron_full_host', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Base URLs are joined with absolute paths"""
        if isinstance(v, str):
            return v.rstrip('/')
        return v

    @field_validator('redis_url', 'tron_api_key', mode='before')
    @classmethod
    def empty_as_none(cls, v):
        """Treat blank env vars as unset"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('max_notice_id')
    @classmethod
    def positive_ceiling(cls, v):
        if v < 1:
            raise ValueError("max_notice_id must be at least 1")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
