"""
Server statistics over notices.

A process server's "served" count is measured in service events, not raw
tokens: every notice with a case number belongs to that case, an alert with
a paired document counts once, anything else counts on its own. An event is
acknowledged if any of its notices is.
"""
from typing import List, Dict, Any

from models.notice import CanonicalNotice, ServerStats, Provenance


def _event_key(notice: CanonicalNotice) -> str:
    if notice.case_number and notice.case_number != 'Unknown':
        return f"case_{notice.case_number}"
    if notice.alert_id and notice.document_id:
        return f"alert_{notice.alert_id}"
    return f"notice_{notice.notice_id}"


def summarize_notices(
    notices: List[CanonicalNotice],
    source: Provenance,
    verified: bool
) -> ServerStats:
    """Build ServerStats counting service events."""
    events: Dict[str, bool] = {}
    for notice in notices:
        key = _event_key(notice)
        events[key] = events.get(key, False) or notice.acknowledged

    acknowledged = sum(1 for ack in events.values() if ack)
    return ServerStats(
        total_served=len(events),
        acknowledged=acknowledged,
        pending=len(events) - acknowledged,
        source=source,
        verified=verified,
        total_notices=len(notices),
        notices=list(notices),
    )


def group_notices_by_case(notices: List[CanonicalNotice]) -> List[Dict[str, Any]]:
    """
    Group notices by case number, most recently served case first.

    Each group: {case_number, notices, acknowledged, last_served}
    """
    groups: Dict[str, Dict[str, Any]] = {}
    for notice in notices:
        case_number = notice.case_number or 'Unknown'
        group = groups.setdefault(case_number, {
            'case_number': case_number,
            'notices': [],
            'acknowledged': False,
            'last_served': 0,
        })
        group['notices'].append(notice)
        group['acknowledged'] = group['acknowledged'] or notice.acknowledged
        group['last_served'] = max(group['last_served'], notice.timestamp)

    for group in groups.values():
        group['notices'].sort(key=lambda n: n.timestamp, reverse=True)

    return sorted(groups.values(), key=lambda g: g['last_served'], reverse=True)
