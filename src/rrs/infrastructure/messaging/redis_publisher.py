from __future__ import annotations

import logging

from rrs.application.ports.publisher import EventPublisher
from rrs.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)


def store_channel(store_id: str) -> str:
    return f"events:{store_id}"


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        receivers = get_redis_client(timeout_seconds=self._timeout_seconds).publish(channel, message)
        logger.debug("event_published", extra={"channel": channel, "count": receivers})
