"""
Notice domain model - the unit of reconciliation

A notice is a legal document served as a paired NFT (alert token + document
token) by a process server to a recipient address. The same notice can be
read from two places:

- backend: fast REST cache, possibly stale
- blockchain: authoritative contract state, slow and rate limited

Both readers produce CanonicalNotice so the reconciliation engine can compare
them by notice_id.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
import time


class NoticeStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"

    @classmethod
    def from_acknowledged(cls, acknowledged: bool) -> 'NoticeStatus':
        return cls.ACKNOWLEDGED if acknowledged else cls.PENDING


class Provenance(str, Enum):
    """Which source produced a record."""
    BACKEND = "backend"
    BLOCKCHAIN = "blockchain"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class CanonicalNotice:
    """
    Source-agnostic notice record.

    Invariants:
    - notice_id is non-empty and unique within one server's result set
    - status always mirrors acknowledged
    - provenance == BLOCKCHAIN implies last_verified is set
    """
    notice_id: str
    recipient: str = ""
    server_address: str = ""
    timestamp: int = 0  # epoch ms

    # Paired token ids
    alert_id: Optional[str] = None
    document_id: Optional[str] = None

    # Classification
    case_number: str = "Unknown"
    notice_type: str = "Legal Notice"

    # Acknowledgment
    acknowledged: bool = False
    status: NoticeStatus = NoticeStatus.PENDING

    # Reconciliation state
    provenance: Provenance = Provenance.BACKEND
    last_verified: Optional[int] = None
    verified: Optional[bool] = None  # None until reconciled

    # Source-specific extras
    acknowledged_at: Optional[str] = None
    view_count: int = 0
    issuing_agency: Optional[str] = None

    def __post_init__(self):
        self.notice_id = str(self.notice_id)
        self.status = NoticeStatus.from_acknowledged(self.acknowledged)
        if self.provenance == Provenance.BLOCKCHAIN and self.last_verified is None:
            self.last_verified = now_ms()

    def set_acknowledged(self, acknowledged: bool):
        """Update acknowledgment, keeping status in step."""
        self.acknowledged = bool(acknowledged)
        self.status = NoticeStatus.from_acknowledged(self.acknowledged)

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the frontend (camelCase)."""
        return {
            'noticeId': self.notice_id,
            'alertId': self.alert_id,
            'documentId': self.document_id,
            'recipient': self.recipient,
            'serverAddress': self.server_address,
            'timestamp': self.timestamp,
            'caseNumber': self.case_number,
            'noticeType': self.notice_type,
            'acknowledged': self.acknowledged,
            'status': self.status.value,
            'provenance': self.provenance.value,
            'lastVerified': self.last_verified,
            'verified': self.verified,
            'acknowledgedAt': self.acknowledged_at,
            'viewCount': self.view_count,
            'issuingAgency': self.issuing_agency,
        }


@dataclass
class ServerStats:
    """Aggregate view of one server's notices."""
    total_served: int
    acknowledged: int
    pending: int
    source: Provenance
    verified: bool
    timestamp: int = field(default_factory=now_ms)
    total_notices: int = 0
    notices: List[CanonicalNotice] = field(default_factory=list)

    def to_dict(self, include_notices: bool = False) -> Dict[str, Any]:
        data = {
            'totalServed': self.total_served,
            'acknowledged': self.acknowledged,
            'pending': self.pending,
            'source': self.source.value,
            'verified': self.verified,
            'timestamp': self.timestamp,
            'totalNotices': self.total_notices,
        }
        if include_notices:
            data['notices'] = [n.to_dict() for n in self.notices]
        return data


@dataclass
class HybridResult:
    """Return value of the hybrid fetch."""
    notices: List[CanonicalNotice]
    source: Provenance
    verified: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'notices': [n.to_dict() for n in self.notices],
            'source': self.source.value,
            'verified': self.verified,
        }


@dataclass
class VerificationJob:
    """Deferred chain verification of backend-sourced notices."""
    server_address: str
    backend_notices: List[CanonicalNotice]
    enqueued_at: int = field(default_factory=now_ms)


@dataclass
class VerificationComplete:
    """Emitted once a verification job has been reconciled."""
    server_address: str
    notices: List[CanonicalNotice]
    reconciled: List[CanonicalNotice]
    completed_at: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'serverAddress': self.server_address,
            'notices': [n.to_dict() for n in self.notices],
            'reconciled': [n.to_dict() for n in self.reconciled],
            'completedAt': self.completed_at,
        }
