"""
Test doubles for the notice service.

Deterministic stand-ins for the contract, the backend reader and the
scheduler; no network access required.
"""
import asyncio
from dataclasses import replace
from typing import Dict, List, Optional

from models.notice import CanonicalNotice, Provenance
from services.tron_client import AlertRecord
from utils.address import to_base58

SERVER_HEX = "41" + "11" * 20
OTHER_SERVER_HEX = "41" + "22" * 20
RECIPIENT_HEX = "41" + "33" * 20

SERVER = to_base58(SERVER_HEX)
OTHER_SERVER = to_base58(OTHER_SERVER_HEX)
RECIPIENT = to_base58(RECIPIENT_HEX)


def make_alert(
    notice_id: int,
    sender: str = SERVER_HEX,
    acknowledged: bool = False,
    case_number: str = "",
    document_id: int = 0,
    timestamp: int = 1700000000
) -> AlertRecord:
    return AlertRecord(
        notice_id=notice_id,
        recipient=RECIPIENT_HEX,
        sender=sender,
        document_id=document_id or notice_id + 1000,
        timestamp=timestamp + notice_id,
        acknowledged=acknowledged,
        issuing_agency="County Court",
        notice_type="Summons",
        case_number=case_number or f"CASE-{notice_id}",
    )


def make_notice(
    notice_id: str,
    acknowledged: bool = False,
    provenance: Provenance = Provenance.BACKEND,
    case_number: str = "Unknown",
    timestamp: int = 1700000000000
) -> CanonicalNotice:
    return CanonicalNotice(
        notice_id=notice_id,
        alert_id=notice_id,
        recipient=RECIPIENT,
        server_address=SERVER,
        timestamp=timestamp,
        case_number=case_number,
        acknowledged=acknowledged,
        provenance=provenance,
    )


class FakeContract:
    """Serves AlertRecords by id; ids in `errors` raise."""

    def __init__(self, records: Optional[Dict[int, AlertRecord]] = None, errors: Optional[Dict[int, Exception]] = None):
        self.records = records or {}
        self.errors = errors or {}
        self.calls: List[int] = []

    async def get_alert_notice(self, notice_id: int) -> Optional[AlertRecord]:
        self.calls.append(notice_id)
        if notice_id in self.errors:
            raise self.errors[notice_id]
        return self.records.get(notice_id)


class FakeBackendReader:
    """Returns a fixed result; optionally waits on a gate first."""

    def __init__(self, result=None, gate: Optional[asyncio.Event] = None):
        self.result = result
        self.gate = gate
        self.calls: List[str] = []

    async def fetch_from_backend(self, server_address: str):
        self.calls.append(server_address)
        if self.gate is not None:
            await self.gate.wait()
        if self.result is None:
            return None
        return [replace(n) for n in self.result]


class FakeScheduler:
    """Records queue_verification calls instead of running them."""

    def __init__(self):
        self.queued: List[tuple] = []

    def queue_verification(self, server_address, backend_notices) -> bool:
        self.queued.append((server_address, backend_notices))
        return True

    def stats(self) -> dict:
        return {
            'state': 'idle',
            'queue_length': len(self.queued),
            'jobs_processed': 0,
            'jobs_failed': 0,
            'jobs_dropped': 0,
        }
