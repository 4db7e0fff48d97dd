from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

from quickstay.schemas.notifications import OutgoingEmail

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(self, email: OutgoingEmail) -> None: ...


class NotificationQueue:
    """Background delivery of emails, decoupled from the request that queued them.

    Each message is retried with exponential backoff; a message that still
    fails after ``max_retries`` attempts is logged and dropped.
    """

    def __init__(
        self,
        mailer: Mailer,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        max_pending: int = 1000,
    ) -> None:
        self._mailer = mailer
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._queue: asyncio.Queue[OutgoingEmail] = asyncio.Queue(maxsize=max_pending)
        self._worker: asyncio.Task | None = None
        self.delivered = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="notification-worker")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    def enqueue(self, email: OutgoingEmail) -> bool:
        try:
            self._queue.put_nowait(email)
        except asyncio.QueueFull:
            logger.error("Notification queue full, dropping email to %s", email.to)
            self.dropped += 1
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued email has been delivered or dropped."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            email = await self._queue.get()
            try:
                await self._deliver(email)
            finally:
                self._queue.task_done()

    async def _deliver(self, email: OutgoingEmail) -> None:
        delay = self._retry_delay
        for attempt in range(1, self._max_retries + 1):
            try:
                await self._mailer.send(email)
                self.delivered += 1
                return
            except Exception:
                logger.warning(
                    "Email to %s failed (attempt %d/%d)",
                    email.to, attempt, self._max_retries, exc_info=True,
                )
            if attempt < self._max_retries:
                await asyncio.sleep(delay)
                delay *= 2

        logger.error("Giving up on email to %s after %d attempts", email.to, self._max_retries)
        self.dropped += 1
