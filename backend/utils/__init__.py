"""
Utility functions
"""
from .datetime_utils import to_epoch_ms, chain_seconds_to_ms
from .address import to_base58, to_hex, is_zero_address

__all__ = ['to_epoch_ms', 'chain_seconds_to_ms', 'to_base58', 'to_hex', 'is_zero_address']
