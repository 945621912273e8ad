"""
Domain Models - Storage-agnostic data structures

These models represent notices independent of where they were read from.
Readers and services operate on these models, not raw API payloads or
contract tuples.

Architecture:
- Domain models are pure Python objects (dataclasses)
- Source details (REST backend, TRON contract) are abstracted via readers
- Reconciliation operates on these models, not raw rows
"""

from .notice import (
    CanonicalNotice,
    NoticeStatus,
    Provenance,
    ServerStats,
    HybridResult,
    VerificationJob,
    VerificationComplete,
    now_ms,
)

__all__ = [
    'CanonicalNotice',
    'NoticeStatus',
    'Provenance',
    'ServerStats',
    'HybridResult',
    'VerificationJob',
    'VerificationComplete',
    'now_ms',
]
