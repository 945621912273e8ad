"""
Configuration module for settings and external client connections.
"""
from .settings import Settings, get_settings
from .clients import (
    create_backend_http_client,
    create_tron_http_client,
    create_redis_client,
    close_redis_client,
)

__all__ = [
    'Settings',
    'get_settings',
    'create_backend_http_client',
    'create_tron_http_client',
    'create_redis_client',
    'close_redis_client',
]
