"""Redis list backing the registration notice queue"""

import json
import logging
from typing import Optional

import redis

from shiftease.config import config

logger = logging.getLogger(__name__)


class NotificationQueue:
    """
    FIFO of serialized notices on a Redis list.

    Producers LPUSH, the worker BRPOP's, so the oldest notice is delivered
    first.
    """

    def __init__(self, client: redis.Redis, key: Optional[str] = None):
        self.client = client
        self.key = key or config["notification_queue_key"]

    def push(self, payload: dict) -> None:
        self.client.lpush(self.key, json.dumps(payload))

    def pop(self, timeout: int = 5) -> Optional[dict]:
        """Block up to ``timeout`` seconds for the next notice"""
        item = self.client.brpop([self.key], timeout=timeout)
        if item is None:
            return None
        _, raw = item
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.error(f"Dropping malformed notice from {self.key}: {raw!r}")
            return None

    def __len__(self) -> int:
        return self.client.llen(self.key)
