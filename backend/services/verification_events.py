"""
Verification events

Listeners are notified when a background verification completes, so a view
showing backend data can be upgraded to verified data.

- VerificationEvents: in-process listener registry (sync or async callbacks)
- RedisEventPublisher: listener that forwards events to a Redis pub/sub
  channel for other processes (UI push, dashboards)
"""
import inspect
import json
import logging
from typing import Callable, List

from models.notice import VerificationComplete

logger = logging.getLogger(__name__)

Listener = Callable[[VerificationComplete], object]


class VerificationEvents:
    """Fan-out of VerificationComplete events. A failing listener is isolated."""

    def __init__(self):
        self.listeners: List[Listener] = []

    def add_listener(self, listener: Listener):
        if listener not in self.listeners:
            self.listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self.listeners:
            self.listeners.remove(listener)

    async def emit(self, event: VerificationComplete):
        logger.debug(f"Emitting verification event for {event.server_address}")
        for listener in list(self.listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Verification listener {listener!r} failed: {e}", exc_info=True)


class RedisEventPublisher:
    """
    Publishes verification events as JSON on a Redis channel.

    Subscribers:
        pubsub = redis_client.pubsub()
        await pubsub.subscribe("notices:verified")
    """

    def __init__(self, redis_client, channel: str = "notices:verified"):
        self.redis = redis_client
        self.channel = channel

    async def __call__(self, event: VerificationComplete):
        message = json.dumps(event.to_dict())
        receivers = await self.redis.publish(self.channel, message)
        logger.debug(f"Published verification for {event.server_address} to {receivers} subscribers")
