"""
Datetime utility functions for normalizing notice timestamps
"""
from datetime import datetime, timezone
from typing import Optional
import logging
import math

logger = logging.getLogger(__name__)

# Epoch values below this are seconds, above are milliseconds (~2001-09 in ms)
MS_THRESHOLD = 10 ** 12


def to_epoch_ms(value) -> Optional[int]:
    """
    Convert a timestamp of unknown shape to epoch milliseconds

    Handles multiple cases:
    - None / empty string -> None
    - Python datetime (naive treated as UTC) -> ms
    - int/float epoch seconds or milliseconds -> ms
    - Numeric string -> as int/float
    - String ISO format (with or without Z) -> ms
    - Other -> None with warning

    Args:
        value: datetime, number, string, or None

    Returns:
        Epoch milliseconds or None
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        logger.warning(f"Cannot convert boolean to timestamp: {value}")
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            logger.warning(f"Cannot convert non-finite number to timestamp: {value}")
            return None
        return int(value) if value >= MS_THRESHOLD else int(value * 1000)

    if isinstance(value, str):
        text = value.strip()
        try:
            return to_epoch_ms(float(text))
        except ValueError:
            pass
        try:
            return to_epoch_ms(datetime.fromisoformat(text.replace('Z', '+00:00')))
        except ValueError as e:
            logger.warning(f"Failed to parse datetime string '{value}': {e}")
            return None

    logger.warning(f"Cannot convert {type(value)} to timestamp: {value}")
    return None


def chain_seconds_to_ms(seconds) -> int:
    """Contract timestamps are block seconds."""
    return int(seconds) * 1000
