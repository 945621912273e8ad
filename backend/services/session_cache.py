"""
Process-local session cache for server stats and verification state

Not a source of truth: losing it (process restart) only costs another
blockchain verification pass.
"""

import time
from collections import OrderedDict
from typing import Dict, Any, Optional, Set
from threading import Lock

from models.notice import ServerStats


class SessionCache:
    """
    Thread-safe in-memory cache keyed by server address.

    Holds three things:
    - server stats (fresh until explicitly refreshed, unless a TTL is given)
    - per-notice acknowledgment snapshots
    - the one-way "blockchain verified this session" flag
    """

    def __init__(self, default_ttl: Optional[int] = None, max_entries: Optional[int] = None):
        self.stats: 'OrderedDict[str, tuple[ServerStats, Optional[float]]]' = OrderedDict()
        self.notice_status: Dict[str, Dict[str, Any]] = {}
        self.verified: Set[str] = set()
        self.lock = Lock()
        self.default_ttl = default_ttl
        self.max_entries = max_entries

    def get_server_stats(self, server_address: str) -> Optional[ServerStats]:
        """Get cached stats if present and not expired"""
        with self.lock:
            if server_address in self.stats:
                value, expiry = self.stats[server_address]
                if expiry is None or time.time() < expiry:
                    return value
                else:
                    # Clean up expired entry
                    del self.stats[server_address]
            return None

    def cache_server_stats(self, server_address: str, stats: ServerStats, ttl: Optional[int] = None):
        """Store stats, evicting the oldest entry when at capacity"""
        ttl = ttl or self.default_ttl
        expiry = time.time() + ttl if ttl else None
        with self.lock:
            self.stats[server_address] = (stats, expiry)
            self.stats.move_to_end(server_address)
            if self.max_entries is not None:
                while len(self.stats) > self.max_entries:
                    self.stats.popitem(last=False)

    def invalidate_server_stats(self, server_address: str):
        with self.lock:
            self.stats.pop(server_address, None)

    def get_notice_status(self, notice_id: str) -> Optional[Dict[str, Any]]:
        with self.lock:
            status = self.notice_status.get(str(notice_id))
            return dict(status) if status else None

    def cache_notice_status(self, notice_id: str, acknowledged: bool, timestamp: int):
        with self.lock:
            self.notice_status[str(notice_id)] = {
                'acknowledged': bool(acknowledged),
                'timestamp': timestamp,
                'cached_at': time.time(),
            }

    def has_verified_blockchain(self, server_address: str) -> bool:
        with self.lock:
            return server_address in self.verified

    def set_blockchain_verified(self, server_address: str):
        """One-way flag: never reset for the lifetime of the process"""
        with self.lock:
            self.verified.add(server_address)

    def clear(self):
        """Drop cached stats and notice snapshots (verification flags survive)"""
        with self.lock:
            self.stats.clear()
            self.notice_status.clear()
