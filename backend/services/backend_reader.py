"""
BackendNoticeReader - fast (possibly stale) notice listing from the REST backend.

The backend has gone through several table layouts, so the same concept can
arrive under different keys (alert_id / alertId, served_at / timestamp, ...).
All of that is handled in one place: FIELD_ALIASES declares the canonical
schema and the accepted source keys, in priority order.

Usage:
    reader = BackendNoticeReader(http_client, base_url="https://api.example")
    notices = await reader.fetch_from_backend("TXyz...")
    # Returns: List[CanonicalNotice], or None when the backend is unusable
"""
import logging
from typing import Optional, List, Dict, Any

import httpx

from models.notice import CanonicalNotice, NoticeStatus, Provenance, now_ms
from utils.datetime_utils import to_epoch_ms

logger = logging.getLogger(__name__)

# Canonical field -> accepted source keys (first present, non-empty wins)
FIELD_ALIASES: Dict[str, List[str]] = {
    'notice_id': ['noticeId', 'notice_id', 'id', 'alertId', 'alert_id'],
    'alert_id': ['alertId', 'alert_id'],
    'document_id': ['documentId', 'document_id'],
    'recipient': ['recipient', 'recipientAddress', 'recipient_address'],
    'server_address': ['serverAddress', 'server_address'],
    'timestamp': ['timestamp', 'served_at', 'alert_delivered_at', 'created_at'],
    'case_number': ['caseNumber', 'case_number'],
    'notice_type': ['noticeType', 'notice_type'],
    'acknowledged': ['acknowledged', 'is_acknowledged', 'isAcknowledged'],
    'status': ['status'],
    'acknowledged_at': ['acknowledgedAt', 'acknowledged_at'],
    'view_count': ['viewCount', 'view_count'],
}

_TRUE_STRINGS = {'true', 't', '1', 'yes'}


def _pick(record: Dict[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def normalize_backend_record(record: Dict[str, Any], server_address: str) -> Optional[CanonicalNotice]:
    """
    Map one backend record onto CanonicalNotice.

    Returns None if the record has no usable notice id.
    """
    notice_id = _pick(record, 'notice_id')
    if notice_id is None or not str(notice_id).strip():
        return None

    acknowledged = _pick(record, 'acknowledged')
    if acknowledged is None:
        status = _pick(record, 'status')
        acknowledged = str(status).lower() == NoticeStatus.ACKNOWLEDGED.value if status else False

    alert_id = _pick(record, 'alert_id')
    document_id = _pick(record, 'document_id')

    return CanonicalNotice(
        notice_id=str(notice_id).strip(),
        alert_id=str(alert_id) if alert_id is not None else None,
        document_id=str(document_id) if document_id is not None else None,
        recipient=str(_pick(record, 'recipient') or ''),
        server_address=str(_pick(record, 'server_address') or server_address),
        timestamp=to_epoch_ms(_pick(record, 'timestamp')) or now_ms(),
        case_number=str(_pick(record, 'case_number') or 'Unknown'),
        notice_type=str(_pick(record, 'notice_type') or 'Legal Notice'),
        acknowledged=_as_bool(acknowledged),
        provenance=Provenance.BACKEND,
        last_verified=None,
        acknowledged_at=_pick(record, 'acknowledged_at'),
        view_count=_as_int(_pick(record, 'view_count')),
    )


class BackendNoticeReader:
    """
    Reads a server's notices from GET /api/notices/server/{address}.

    Never raises: any failure means "no usable backend data" and the caller
    falls back to the chain.
    """

    NOTICES_PATH = "/api/notices/server/{address}"

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, limit: int = 100):
        self.http = http_client
        self.base_url = (base_url or "").rstrip('/')
        self.limit = limit

    async def fetch_from_backend(self, server_address: str) -> Optional[List[CanonicalNotice]]:
        if not self.base_url:
            logger.debug("No backend URL configured")
            return None

        url = self.base_url + self.NOTICES_PATH.format(address=server_address)

        try:
            response = await self.http.get(url, params={'limit': self.limit})
        except httpx.TimeoutException:
            logger.warning(f"Backend fetch timed out for {server_address}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Backend fetch failed for {server_address}: {e}")
            return None

        if not response.is_success:
            logger.warning(
                f"Backend fetch failed for {server_address} - "
                f"status {response.status_code}: {response.text[:200]}"
            )
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Backend returned non-JSON body for {server_address}")
            return None

        records = data.get('notices') if isinstance(data, dict) else data
        if not isinstance(records, list):
            logger.warning(f"Backend response for {server_address} is not a notice list")
            return None

        notices = []
        seen = set()
        for record in records:
            if not isinstance(record, dict):
                logger.warning(f"Skipping non-object backend record: {record!r}")
                continue
            notice = normalize_backend_record(record, server_address)
            if notice is None:
                logger.warning(f"Skipping backend record without notice id: {record}")
                continue
            if notice.notice_id in seen:
                logger.debug(f"Duplicate backend notice {notice.notice_id}, keeping first")
                continue
            seen.add(notice.notice_id)
            notices.append(notice)

        logger.info(f"📥 Backend returned {len(notices)} notices for {server_address}")
        return notices
