#!/usr/bin/env python3
"""ShiftEase notifier - drains the Redis notice queue and sends the emails"""

import asyncio
import signal
from typing import Optional

import redis
from pydantic import ValidationError as PydanticValidationError

from shiftease.backends.notification_queue import NotificationQueue
from shiftease.logging_config import get_logger, setup_logging
from shiftease.models.database import get_redis
from shiftease.services.notification_service import (
    NotificationService,
    RegistrationNotice,
)

logger = get_logger(__name__)


class NotificationWorker:
    def __init__(
        self,
        queue: NotificationQueue,
        service: Optional[NotificationService] = None,
        poll_timeout: int = 5,
    ):
        self.queue = queue
        self.service = service or NotificationService()
        self.poll_timeout = poll_timeout
        self._stopping = asyncio.Event()

    def stop(self) -> None:
        self._stopping.set()

    async def handle(self, payload: dict) -> bool:
        try:
            notice = RegistrationNotice.model_validate(payload)
        except PydanticValidationError as e:
            logger.error(f"Discarding invalid notice: {e}")
            return False
        return await self.service.deliver(notice)

    async def run_once(self) -> Optional[bool]:
        """Deliver the next queued notice. None when the queue stayed empty."""
        payload = await asyncio.to_thread(self.queue.pop, self.poll_timeout)
        if payload is None:
            return None
        return await self.handle(payload)

    async def run(self) -> None:
        logger.info(f"Notifier listening on {self.queue.key}")
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except redis.RedisError as e:
                logger.error(f"Redis error while polling notices: {e}")
                await asyncio.sleep(self.poll_timeout)
        logger.info("Notifier stopped")


async def _serve() -> None:
    client = get_redis()
    if client is None:
        raise SystemExit("REDIS_URL must be set to run the notifier")

    worker = NotificationWorker(NotificationQueue(client))
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)
    await worker.run()


def main() -> None:
    setup_logging(service="shiftease-notifier")
    asyncio.run(_serve())


if __name__ == "__main__":
    main()
