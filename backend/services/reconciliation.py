"""
Reconciliation of backend notices against chain notices.

The chain is the source of truth: when both sides know a notice, the backend
record takes the chain's acknowledgment. Backend records the chain did not
return are flagged unverified (not confirmed this pass, which is not the same
as "does not exist").
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List

from models.notice import CanonicalNotice

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    matched: int = 0
    corrected: int = 0
    unverified: int = 0


def _build_index(notices: List[CanonicalNotice]) -> Dict[str, CanonicalNotice]:
    index: Dict[str, CanonicalNotice] = {}
    for notice in notices:
        if notice.notice_id in index:
            logger.warning(f"Duplicate chain notice {notice.notice_id}; keeping first occurrence")
            continue
        index[notice.notice_id] = notice
    return index


def reconcile(
    backend_notices: List[CanonicalNotice],
    blockchain_notices: List[CanonicalNotice],
) -> List[CanonicalNotice]:
    """
    Annotate backend notices in place and return the same list.

    Idempotent: running it again on the same pair changes nothing.
    """
    chain_index = _build_index(blockchain_notices)
    report = ReconciliationReport()

    for notice in backend_notices:
        chain_notice = chain_index.get(notice.notice_id)
        if chain_notice is None:
            notice.verified = False
            report.unverified += 1
            continue

        report.matched += 1
        if notice.acknowledged != chain_notice.acknowledged:
            logger.info(
                f"Notice {notice.notice_id} status mismatch - "
                f"backend: {notice.acknowledged}, chain: {chain_notice.acknowledged}"
            )
            notice.set_acknowledged(chain_notice.acknowledged)
            report.corrected += 1
        notice.verified = True
        notice.last_verified = chain_notice.last_verified

    logger.info(
        f"Reconciled {len(backend_notices)} backend notices against {len(chain_index)} chain notices: "
        f"matched={report.matched} corrected={report.corrected} unverified={report.unverified}"
    )
    return backend_notices
