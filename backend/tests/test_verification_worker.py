"""
Tests for the background verification scheduler.
"""

import asyncio

import pytest

from services.blockchain_reader import BlockchainNoticeReader
from services.verification_events import VerificationEvents
from workers.verification_worker import VerificationScheduler, SchedulerState
from fakes import FakeContract, make_alert, make_notice, SERVER, OTHER_SERVER


class RecordingListener:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


class GatedReader:
    """Blocks inside the scan until released."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch_from_blockchain(self, server_address):
        self.started.set()
        await self.release.wait()
        return []


class FlakyReader:
    def __init__(self, failing):
        self.failing = failing
        self.calls = []

    async def fetch_from_blockchain(self, server_address):
        self.calls.append(server_address)
        if server_address == self.failing:
            raise RuntimeError("rpc exploded")
        return []


def _scheduler(reader, listener=None, **kwargs):
    events = VerificationEvents()
    if listener is not None:
        events.add_listener(listener)
    kwargs.setdefault('inter_job_delay', 0)
    return VerificationScheduler(reader, events, **kwargs)


class TestVerificationScheduler:
    @pytest.mark.asyncio
    async def test_reconciles_and_emits(self, cache):
        contract = FakeContract({1: make_alert(1, acknowledged=True)})
        reader = BlockchainNoticeReader(contract, cache, max_notice_id=20)
        listener = RecordingListener()
        scheduler = _scheduler(reader, listener)
        backend = [make_notice("1", acknowledged=False), make_notice("2")]

        assert scheduler.queue_verification(SERVER, backend) is True
        await scheduler.join()
        await scheduler.stop()

        assert len(listener.events) == 1
        event = listener.events[0]
        assert event.server_address == SERVER
        assert [n.notice_id for n in event.notices] == ["1"]
        assert event.reconciled is backend
        assert backend[0].acknowledged is True and backend[0].verified is True
        assert backend[1].verified is False
        assert cache.has_verified_blockchain(SERVER) is True

    @pytest.mark.asyncio
    async def test_duplicate_jobs_each_complete(self):
        """Repeated requests for one server are not coalesced or dropped."""
        reader = FlakyReader(failing=None)
        listener = RecordingListener()
        scheduler = _scheduler(reader, listener)

        scheduler.queue_verification("Tabc", [make_notice("1")])
        scheduler.queue_verification("Tabc", [make_notice("1")])
        await scheduler.join()
        await scheduler.stop()

        assert [e.server_address for e in listener.events] == ["Tabc", "Tabc"]
        assert reader.calls == ["Tabc", "Tabc"]

    @pytest.mark.asyncio
    async def test_jobs_run_in_fifo_order(self):
        reader = FlakyReader(failing=None)
        scheduler = _scheduler(reader)

        for address in ("A", "B", "C"):
            scheduler.queue_verification(address, [])
        await scheduler.join()
        await scheduler.stop()

        assert reader.calls == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_queue(self):
        reader = FlakyReader(failing=OTHER_SERVER)
        listener = RecordingListener()
        scheduler = _scheduler(reader, listener)

        scheduler.queue_verification(OTHER_SERVER, [])
        scheduler.queue_verification(SERVER, [])
        await scheduler.join()
        await scheduler.stop()

        assert [e.server_address for e in listener.events] == [SERVER]
        assert scheduler.jobs_failed == 1
        assert scheduler.jobs_processed == 1

    @pytest.mark.asyncio
    async def test_state_machine(self):
        reader = GatedReader()
        scheduler = _scheduler(reader)
        assert scheduler.state == SchedulerState.IDLE

        scheduler.queue_verification(SERVER, [])
        await asyncio.wait_for(reader.started.wait(), timeout=1)
        assert scheduler.state == SchedulerState.PROCESSING

        reader.release.set()
        await scheduler.join()
        await asyncio.sleep(0.01)
        assert scheduler.state == SchedulerState.IDLE

        await scheduler.stop()
        assert scheduler.state == SchedulerState.STOPPED
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_full_queue_rejects_job(self):
        scheduler = _scheduler(FlakyReader(failing=None), max_queue_size=1)

        assert scheduler.queue_verification(SERVER, []) is True
        assert scheduler.queue_verification(SERVER, []) is False
        assert scheduler.stats()['jobs_dropped'] == 1

        await scheduler.join()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_interrupts_inter_job_delay(self):
        scheduler = _scheduler(FlakyReader(failing=None), inter_job_delay=60)

        scheduler.queue_verification(SERVER, [])
        await scheduler.join()
        await asyncio.wait_for(scheduler.stop(), timeout=1)

        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_stop_discards_pending_jobs_and_refuses_new_ones(self):
        reader = FlakyReader(failing=None)
        scheduler = _scheduler(reader, inter_job_delay=60)

        scheduler.queue_verification("A", [])
        scheduler.queue_verification("B", [])
        while not reader.calls:
            await asyncio.sleep(0)
        await scheduler.stop()

        assert scheduler.queue.qsize() == 0
        await asyncio.wait_for(scheduler.join(), timeout=1)

        assert scheduler.queue_verification("C", []) is False
        await asyncio.sleep(0.01)
        assert reader.calls == ["A"]
        assert scheduler.running is False
        assert scheduler.state == SchedulerState.STOPPED

    @pytest.mark.asyncio
    async def test_start_after_stop_accepts_jobs_again(self):
        reader = FlakyReader(failing=None)
        scheduler = _scheduler(reader)
        await scheduler.stop()

        scheduler.start()
        assert scheduler.queue_verification("A", []) is True
        await scheduler.join()
        await scheduler.stop()

        assert reader.calls == ["A"]

    @pytest.mark.asyncio
    async def test_idle_during_inter_job_delay(self):
        reader = FlakyReader(failing=None)
        scheduler = _scheduler(reader, inter_job_delay=60)

        scheduler.queue_verification(SERVER, [])
        await scheduler.join()
        await asyncio.sleep(0)

        assert scheduler.state == SchedulerState.IDLE
        assert scheduler.running is True
        await scheduler.stop()
