"""
Notice API Endpoints
====================

REST API over the hybrid notice service.

Endpoints:
- GET /api/servers/{address}/notices - Notices served (backend first, chain fallback)
- GET /api/servers/{address}/stats - Service-event statistics
- GET /api/servers/{address}/cases - Notices grouped by case number
- GET /api/verification/status - Background verification worker status
"""

from fastapi import APIRouter, HTTPException, Depends, Request, Query
from pydantic import BaseModel
from typing import List, Optional

from services.errors import NoticeDataUnavailableError
from services.hybrid_data_service import HybridDataService
from workers.verification_worker import VerificationScheduler

router = APIRouter()


def get_service(request: Request) -> HybridDataService:
    """Service built by the app lifespan."""
    return request.app.state.hybrid_service


def get_scheduler(request: Request) -> VerificationScheduler:
    return request.app.state.scheduler


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class NoticeOut(BaseModel):
    noticeId: str
    alertId: Optional[str] = None
    documentId: Optional[str] = None
    recipient: str
    serverAddress: str
    timestamp: int
    caseNumber: str
    noticeType: str
    acknowledged: bool
    status: str
    provenance: str
    lastVerified: Optional[int] = None
    verified: Optional[bool] = None
    acknowledgedAt: Optional[str] = None
    viewCount: int = 0
    issuingAgency: Optional[str] = None


class NoticesResponse(BaseModel):
    notices: List[NoticeOut]
    source: str
    verified: bool


class StatsResponse(BaseModel):
    totalServed: int
    acknowledged: int
    pending: int
    source: str
    verified: bool
    timestamp: int
    totalNotices: int


class CaseGroupOut(BaseModel):
    caseNumber: str
    acknowledged: bool
    lastServed: int
    notices: List[NoticeOut]


class VerificationStatus(BaseModel):
    state: str
    queue_length: int
    jobs_processed: int
    jobs_failed: int
    jobs_dropped: int


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/servers/{address}/notices", response_model=NoticesResponse)
async def list_server_notices(
    address: str,
    force_blockchain: bool = Query(False, description="Skip the backend and scan the chain"),
    service: HybridDataService = Depends(get_service),
):
    try:
        result = await service.fetch_notices_hybrid(address, force_blockchain=force_blockchain)
    except NoticeDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return result.to_dict()


@router.get("/servers/{address}/stats", response_model=StatsResponse)
async def server_stats(
    address: str,
    force_refresh: bool = False,
    service: HybridDataService = Depends(get_service),
):
    try:
        stats = await service.get_server_stats(address, force_refresh=force_refresh)
    except NoticeDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return stats.to_dict()


@router.get("/servers/{address}/cases", response_model=List[CaseGroupOut])
async def server_cases(address: str, service: HybridDataService = Depends(get_service)):
    try:
        groups = await service.get_cases(address)
    except NoticeDataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [
        {
            'caseNumber': g['case_number'],
            'acknowledged': g['acknowledged'],
            'lastServed': g['last_served'],
            'notices': [n.to_dict() for n in g['notices']],
        }
        for g in groups
    ]


@router.get("/verification/status", response_model=VerificationStatus)
async def verification_status(scheduler: VerificationScheduler = Depends(get_scheduler)):
    return scheduler.stats()
