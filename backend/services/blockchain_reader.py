"""
BlockchainNoticeReader - authoritative notice listing from the contract.

The contract has no "notices by server" index, so the reader walks alert ids
1, 2, 3, ... and keeps the ones whose sender is the requested server. Ids are
assumed to be allocated densely from 1: the walk stops at the first id that
is empty or fails, and never goes past max_notice_id (each id is one rate
limited RPC call).
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from models.notice import CanonicalNotice, Provenance, now_ms
from services.notice_stats import summarize_notices
from services.session_cache import SessionCache
from services.tron_client import AlertRecord, record_addresses
from utils.datetime_utils import chain_seconds_to_ms

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of one sequential scan."""
    notices: List[CanonicalNotice] = field(default_factory=list)
    last_id_checked: int = 0
    queries_ok: int = 0
    stopped_by_error: Optional[str] = None

    @property
    def reached_chain(self) -> bool:
        """False only when the very first query failed."""
        return self.queries_ok > 0 or self.stopped_by_error is None


def alert_to_notice(record: AlertRecord, verified_at: int) -> CanonicalNotice:
    recipient, sender = record_addresses(record)
    return CanonicalNotice(
        notice_id=str(record.notice_id),
        alert_id=str(record.notice_id),
        document_id=str(record.document_id) if record.document_id else None,
        recipient=recipient,
        server_address=sender,
        timestamp=chain_seconds_to_ms(record.timestamp),
        case_number=record.case_number or 'Unknown',
        notice_type=record.notice_type or 'Legal Notice',
        acknowledged=bool(record.acknowledged),
        provenance=Provenance.BLOCKCHAIN,
        last_verified=verified_at,
        issuing_agency=record.issuing_agency or None,
    )


class BlockchainNoticeReader:
    """
    Sequential, bounded scan of the notice contract.

    Writes every scan into the session cache and marks the server as
    blockchain-verified once the chain has answered.
    """

    def __init__(
        self,
        contract,
        cache: SessionCache,
        max_notice_id: int = 20,
        query_delay: float = 0.0
    ):
        """
        Args:
            contract: Object with async get_alert_notice(id) -> AlertRecord | None
            cache: Session cache to populate
            max_notice_id: Scan ceiling (inclusive)
            query_delay: Seconds to wait between consecutive queries
        """
        self.contract = contract
        self.cache = cache
        self.max_notice_id = max_notice_id
        self.query_delay = query_delay

    async def fetch_from_blockchain(self, server_address: str) -> List[CanonicalNotice]:
        result = await self.scan(server_address)
        return result.notices

    async def scan(self, server_address: str) -> ScanResult:
        result = ScanResult()
        logger.info(f"⛓️  Scanning alerts 1..{self.max_notice_id} for {server_address}")

        for notice_id in range(1, self.max_notice_id + 1):
            if notice_id > 1 and self.query_delay:
                await asyncio.sleep(self.query_delay)

            result.last_id_checked = notice_id
            try:
                record = await self.contract.get_alert_notice(notice_id)
            except Exception as e:
                # A failing id is treated as the end of the sequence
                result.stopped_by_error = f"alert {notice_id}: {e}"
                logger.info(f"Scan stopped at alert {notice_id}: {e}")
                break

            result.queries_ok += 1
            if record is None:
                logger.debug(f"Scan reached end of sequence at alert {notice_id}")
                break

            try:
                notice = alert_to_notice(record, now_ms())
            except ValueError as e:
                result.stopped_by_error = f"alert {notice_id}: {e}"
                logger.warning(f"Undecodable alert {notice_id}, stopping scan: {e}")
                break

            if notice.server_address != server_address:
                continue

            self.cache.cache_notice_status(notice.notice_id, notice.acknowledged, notice.timestamp)
            result.notices.append(notice)

        if result.reached_chain:
            stats = summarize_notices(result.notices, Provenance.BLOCKCHAIN, verified=True)
            self.cache.cache_server_stats(server_address, stats)
            self.cache.set_blockchain_verified(server_address)
        else:
            logger.warning(f"Chain unreachable for {server_address}: {result.stopped_by_error}")

        logger.info(
            f"⛓️  Found {len(result.notices)} notices for {server_address} "
            f"(checked {result.last_id_checked} ids)"
        )
        return result
