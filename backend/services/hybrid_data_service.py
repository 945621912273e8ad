"""
HybridDataService - "return fast, verify slow, reconcile async"

Answers "what notices has server S served?":
1. Backend data is returned immediately when available
2. If the chain has not confirmed S this session, verification is queued
3. The scheduler later reconciles and emits VerificationComplete

Usage:
    service = HybridDataService(backend_reader, blockchain_reader, cache, scheduler)
    result = await service.fetch_notices_hybrid("TXyz...")
    # Returns: HybridResult(notices=[...], source=Provenance.BACKEND, verified=False)
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Any

from models.notice import HybridResult, Provenance, ServerStats
from services.backend_reader import BackendNoticeReader
from services.blockchain_reader import BlockchainNoticeReader, ScanResult
from services.errors import NoticeDataUnavailableError
from services.notice_stats import summarize_notices, group_notices_by_case
from services.session_cache import SessionCache
from workers.verification_worker import VerificationScheduler

logger = logging.getLogger(__name__)


class HybridDataService:
    """
    Orchestrates the backend reader, blockchain reader and verification
    scheduler around one session cache.

    Concurrent identical reads for the same address share one in-flight
    request.
    """

    def __init__(
        self,
        backend_reader: BackendNoticeReader,
        blockchain_reader: BlockchainNoticeReader,
        cache: SessionCache,
        scheduler: VerificationScheduler
    ):
        self.backend_reader = backend_reader
        self.blockchain_reader = blockchain_reader
        self.cache = cache
        self.scheduler = scheduler
        self._pending: Dict[str, asyncio.Future] = {}

    async def _coalesce(self, key: str, factory: Callable[[], Awaitable[Any]]):
        pending = self._pending.get(key)
        if pending is not None:
            logger.debug(f"Reusing pending request {key}")
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(factory())
        self._pending[key] = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._pending.get(key) is task:
                del self._pending[key]

    async def _backend(self, server_address: str):
        return await self._coalesce(
            f"backend-{server_address}",
            lambda: self.backend_reader.fetch_from_backend(server_address),
        )

    async def _chain(self, server_address: str) -> ScanResult:
        return await self._coalesce(
            f"blockchain-{server_address}",
            lambda: self.blockchain_reader.scan(server_address),
        )

    async def fetch_notices_hybrid(self, server_address: str, force_blockchain: bool = False) -> HybridResult:
        if not server_address:
            raise ValueError("server_address is required")

        backend_notices = None
        if not force_blockchain:
            backend_notices = await self._backend(server_address)

        if force_blockchain or not backend_notices:
            logger.info(
                f"Using chain for {server_address} "
                f"({'forced' if force_blockchain else 'no backend data'})"
            )
            return await self._from_chain(server_address, backend_available=backend_notices is not None)

        verified = self.cache.has_verified_blockchain(server_address)
        if not verified:
            self.scheduler.queue_verification(server_address, backend_notices)

        return HybridResult(notices=backend_notices, source=Provenance.BACKEND, verified=verified)

    async def _from_chain(self, server_address: str, backend_available: bool) -> HybridResult:
        scan = await self._chain(server_address)
        if scan.reached_chain:
            return HybridResult(notices=scan.notices, source=Provenance.BLOCKCHAIN, verified=True)

        if backend_available:
            # Backend answered (empty); the chain could not confirm it
            return HybridResult(notices=scan.notices, source=Provenance.BLOCKCHAIN, verified=False)

        cached = self.cache.get_server_stats(server_address)
        if cached is not None and cached.source == Provenance.BLOCKCHAIN:
            logger.warning(f"Serving cached chain notices for {server_address}")
            return HybridResult(notices=list(cached.notices), source=Provenance.BLOCKCHAIN, verified=False)

        raise NoticeDataUnavailableError(server_address)

    async def get_server_stats(self, server_address: str, force_refresh: bool = False) -> ServerStats:
        if not force_refresh:
            cached = self.cache.get_server_stats(server_address)
            if cached is not None:
                logger.debug(f"Using cached server stats for {server_address}")
                return cached

        result = await self.fetch_notices_hybrid(server_address, force_blockchain=force_refresh)
        stats = summarize_notices(result.notices, result.source, result.verified)
        self.cache.cache_server_stats(server_address, stats)
        return stats

    async def get_cases(self, server_address: str) -> List[Dict[str, Any]]:
        result = await self.fetch_notices_hybrid(server_address)
        return group_notices_by_case(result.notices)
