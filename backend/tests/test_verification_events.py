"""
Tests for verification event fan-out and Redis publishing.
"""

import json
from unittest.mock import AsyncMock

import pytest

from models.notice import VerificationComplete
from services.verification_events import VerificationEvents, RedisEventPublisher
from fakes import make_notice, SERVER


def _event():
    return VerificationComplete(server_address=SERVER, notices=[make_notice("1")], reconciled=[])


class TestVerificationEvents:
    @pytest.mark.asyncio
    async def test_sync_and_async_listeners(self):
        events = VerificationEvents()
        received = []

        async def async_listener(event):
            received.append(('async', event.server_address))

        events.add_listener(lambda e: received.append(('sync', e.server_address)))
        events.add_listener(async_listener)

        await events.emit(_event())

        assert received == [('sync', SERVER), ('async', SERVER)]

    @pytest.mark.asyncio
    async def test_failing_listener_is_isolated(self):
        events = VerificationEvents()
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        events.add_listener(broken)
        events.add_listener(received.append)

        await events.emit(_event())

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_remove_listener(self):
        events = VerificationEvents()
        received = []
        events.add_listener(received.append)
        events.add_listener(received.append)  # ignored duplicate
        events.remove_listener(received.append)

        await events.emit(_event())

        assert received == []


@pytest.mark.asyncio
async def test_redis_publisher_sends_json():
    redis_client = AsyncMock()
    redis_client.publish.return_value = 2
    publisher = RedisEventPublisher(redis_client, channel="notices:verified")

    await publisher(_event())

    channel, message = redis_client.publish.call_args.args
    assert channel == "notices:verified"
    payload = json.loads(message)
    assert payload['serverAddress'] == SERVER
    assert payload['notices'][0]['noticeId'] == "1"
