"""
Background blockchain verification

Backend data is returned to callers immediately; this worker confirms it
against the chain later, one server at a time:

1. Pop a job from the in-memory FIFO queue (blocks while idle)
2. Scan the chain for the job's server
3. Reconcile the job's backend notices against the scan
4. Emit VerificationComplete
5. Wait inter_job_delay before the next job (throttles bursts)

Repeated jobs for the same server are not coalesced; each runs its own pass.
"""
import asyncio
import logging
from enum import Enum
from typing import List, Optional

from models.notice import CanonicalNotice, VerificationComplete, VerificationJob
from services.blockchain_reader import BlockchainNoticeReader
from services.reconciliation import reconcile
from services.verification_events import VerificationEvents

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    STOPPED = "stopped"


class VerificationScheduler:
    """
    Single background worker draining verification jobs.

    Lifecycle:
    - start(): spawn the worker task (also done lazily on first enqueue)
    - stop(): cancel the worker and discard queued jobs; later enqueues are
      refused until start() is called again
    - join(): wait until every queued job has been processed
    """

    def __init__(
        self,
        blockchain_reader: BlockchainNoticeReader,
        events: VerificationEvents,
        inter_job_delay: float = 2.0,
        max_queue_size: int = 100,
        worker_name: str = "verification"
    ):
        self.blockchain_reader = blockchain_reader
        self.events = events
        self.inter_job_delay = inter_job_delay
        self.worker_name = worker_name
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.state = SchedulerState.IDLE
        self.jobs_processed = 0
        self.jobs_failed = 0
        self.jobs_dropped = 0
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Spawn the worker task on the running loop."""
        if self.running:
            return
        self._stopped = False
        self.state = SchedulerState.IDLE
        self._task = asyncio.create_task(self._run(), name=f"{self.worker_name}-worker")
        logger.info(f"[{self.worker_name}] Started")

    async def stop(self):
        """Cancel the worker, wait for it to exit and drop pending jobs."""
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        discarded = 0
        while True:
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self.queue.task_done()
            discarded += 1

        self.state = SchedulerState.STOPPED
        logger.info(
            f"[{self.worker_name}] Shutting down. "
            f"Processed: {self.jobs_processed}, Failed: {self.jobs_failed}, Discarded: {discarded}"
        )

    async def join(self):
        """Wait until all queued jobs have been processed."""
        await self.queue.join()

    def queue_verification(self, server_address: str, backend_notices: List[CanonicalNotice]) -> bool:
        """
        Fire-and-forget enqueue. Returns False if the queue is full or the
        scheduler has been stopped.
        """
        if self._stopped:
            logger.warning(f"[{self.worker_name}] Stopped, refusing verification for {server_address}")
            return False

        job = VerificationJob(server_address=server_address, backend_notices=backend_notices)
        try:
            self.queue.put_nowait(job)
        except asyncio.QueueFull:
            self.jobs_dropped += 1
            logger.warning(f"[{self.worker_name}] Queue full, dropping verification for {server_address}")
            return False

        logger.info(f"[{self.worker_name}] Queued verification for {server_address} (queue={self.queue.qsize()})")
        if not self.running:
            self.start()
        return True

    async def _run(self):
        while True:
            job = await self.queue.get()
            self.state = SchedulerState.PROCESSING
            try:
                await self.process(job)
                self.jobs_processed += 1
            except Exception as e:
                self.jobs_failed += 1
                logger.error(f"[{self.worker_name}] Verification failed for {job.server_address}: {e}", exc_info=True)
            finally:
                self.queue.task_done()

            if self.queue.empty():
                self.state = SchedulerState.IDLE
            await asyncio.sleep(self.inter_job_delay)

    async def process(self, job: VerificationJob):
        logger.info(f"[{self.worker_name}] Verifying {job.server_address}")
        chain_notices = await self.blockchain_reader.fetch_from_blockchain(job.server_address)
        reconciled = reconcile(job.backend_notices, chain_notices)
        await self.events.emit(VerificationComplete(
            server_address=job.server_address,
            notices=chain_notices,
            reconciled=reconciled,
        ))

    def stats(self) -> dict:
        return {
            'state': self.state.value,
            'queue_length': self.queue.qsize(),
            'jobs_processed': self.jobs_processed,
            'jobs_failed': self.jobs_failed,
            'jobs_dropped': self.jobs_dropped,
        }
