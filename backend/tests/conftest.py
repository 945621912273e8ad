"""
Pytest configuration for notice service tests.
"""

import pytest

from services.session_cache import SessionCache
from services.blockchain_reader import BlockchainNoticeReader
from fakes import FakeContract, make_alert


@pytest.fixture
def cache():
    return SessionCache()


@pytest.fixture
def dense_contract():
    """Alerts 1-5 minted by SERVER, nothing after."""
    return FakeContract({i: make_alert(i, acknowledged=(i % 2 == 0)) for i in range(1, 6)})


@pytest.fixture
def chain_reader(dense_contract, cache):
    return BlockchainNoticeReader(dense_contract, cache, max_notice_id=20)
