"""
API tests for the notice endpoints (service wired with fakes).
"""

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.notices import router
from services.blockchain_reader import BlockchainNoticeReader
from services.hybrid_data_service import HybridDataService
from services.session_cache import SessionCache
from fakes import FakeBackendReader, FakeContract, FakeScheduler, make_alert, make_notice, SERVER


def _client(backend_result, contract=None):
    cache = SessionCache()
    contract = contract or FakeContract({1: make_alert(1, case_number="CASE-A")})
    scheduler = FakeScheduler()
    service = HybridDataService(
        FakeBackendReader(backend_result),
        BlockchainNoticeReader(contract, cache, max_notice_id=20),
        cache,
        scheduler,
    )
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.state.hybrid_service = service
    app.state.scheduler = scheduler
    return TestClient(app)


class TestNoticesEndpoint:
    def test_backend_result(self):
        client = _client([make_notice("7", case_number="CASE-Z")])

        response = client.get(f"/api/servers/{SERVER}/notices")

        assert response.status_code == 200
        data = response.json()
        assert data['source'] == "backend"
        assert data['verified'] is False
        assert data['notices'][0]['noticeId'] == "7"
        assert data['notices'][0]['status'] == "pending"

    def test_force_blockchain(self):
        client = _client([make_notice("7")])

        data = client.get(f"/api/servers/{SERVER}/notices", params={'force_blockchain': 'true'}).json()

        assert data['source'] == "blockchain"
        assert data['verified'] is True
        assert [n['noticeId'] for n in data['notices']] == ["1"]
        assert data['notices'][0]['lastVerified'] is not None

    def test_no_data_is_503(self):
        client = _client(None, contract=FakeContract(errors={1: httpx.ConnectError("down")}))

        response = client.get(f"/api/servers/{SERVER}/notices")

        assert response.status_code == 503


def test_stats_endpoint():
    client = _client([make_notice("1", case_number="A"), make_notice("2", case_number="A", acknowledged=True)])

    data = client.get(f"/api/servers/{SERVER}/stats").json()

    assert data['totalServed'] == 1
    assert data['acknowledged'] == 1
    assert data['totalNotices'] == 2


def test_cases_endpoint():
    client = _client([
        make_notice("1", case_number="A", timestamp=1000),
        make_notice("2", case_number="B", timestamp=2000),
    ])

    data = client.get(f"/api/servers/{SERVER}/cases").json()

    assert [g['caseNumber'] for g in data] == ["B", "A"]


def test_verification_status():
    data = _client([]).get("/api/verification/status").json()
    assert data['state'] == "idle"
    assert data['queue_length'] == 0
