"""
Client Configuration
====================

Centralized construction of the external collaborators used by the service.
Handles the notice backend, the TronGrid node and the optional Redis
connection, all driven by Settings.
"""
import logging
from typing import Optional

import httpx

from config.settings import Settings

logger = logging.getLogger(__name__)


def create_backend_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client for the notice backend (JSON API)."""
    return httpx.AsyncClient(
        timeout=settings.backend_request_timeout,
        headers={'Content-Type': 'application/json'},
    )


def create_tron_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client for the TronGrid full node."""
    headers = {'Content-Type': 'application/json'}
    if settings.tron_api_key:
        headers['TRON-PRO-API-KEY'] = settings.tron_api_key
    return httpx.AsyncClient(
        base_url=settings.tron_full_host,
        timeout=settings.tron_request_timeout,
        headers=headers,
    )


async def create_redis_client(settings: Settings):
    """Create a Redis connection when REDIS_URL is configured, else None."""
    if not settings.redis_url:
        return None
    import redis.asyncio as redis
    client = await redis.from_url(settings.redis_url, decode_responses=True)
    logger.info(f"Redis event publishing enabled on {settings.verification_channel}")
    return client


async def close_redis_client(client: Optional[object]):
    """Close a client returned by create_redis_client."""
    if client is not None:
        await client.close()
