"""
Legal Notice Service - FastAPI Backend

Run:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from project root (one level up from backend/)
load_dotenv(Path(__file__).parent.parent / '.env')

from api.notices import router as notices_router
from config import (
    get_settings,
    create_backend_http_client,
    create_tron_http_client,
    create_redis_client,
    close_redis_client,
)
from services.backend_reader import BackendNoticeReader
from services.blockchain_reader import BlockchainNoticeReader
from services.hybrid_data_service import HybridDataService
from services.session_cache import SessionCache
from services.tron_client import TronContractClient
from services.verification_events import VerificationEvents, RedisEventPublisher
from workers.verification_worker import VerificationScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    )

    backend_http = create_backend_http_client(settings)
    tron_http = create_tron_http_client(settings)
    redis_client = await create_redis_client(settings)

    cache = SessionCache()
    events = VerificationEvents()
    if redis_client is not None:
        events.add_listener(RedisEventPublisher(redis_client, settings.verification_channel))

    contract = TronContractClient(tron_http, settings.notice_contract_address)
    blockchain_reader = BlockchainNoticeReader(
        contract,
        cache,
        max_notice_id=settings.max_notice_id,
        query_delay=settings.scan_query_delay,
    )
    backend_reader = BackendNoticeReader(
        backend_http,
        settings.backend_api_url,
        limit=settings.backend_notice_limit,
    )
    scheduler = VerificationScheduler(
        blockchain_reader,
        events,
        inter_job_delay=settings.verification_delay,
        max_queue_size=settings.verification_queue_size,
    )
    scheduler.start()

    app.state.cache = cache
    app.state.events = events
    app.state.scheduler = scheduler
    app.state.hybrid_service = HybridDataService(backend_reader, blockchain_reader, cache, scheduler)
    logger.info(f"✅ Notice service ready (backend={settings.backend_api_url or 'none'}, chain={settings.tron_full_host})")

    try:
        yield
    finally:
        await scheduler.stop()
        await backend_http.aclose()
        await tron_http.aclose()
        await close_redis_client(redis_client)


app = FastAPI(
    title="Legal Notice Service",
    description="Hybrid backend/blockchain notice reads with background verification",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(notices_router, prefix="/api", tags=["Notices"])


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "notice-service"}
