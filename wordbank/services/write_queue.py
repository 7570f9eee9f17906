import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger


@dataclass(frozen=True)
class PendingWrite:
    description: str
    action: Callable[[], Awaitable[None]]


class WriteBehindQueue:
    """Durable writes issued after the in-memory state has already changed.

    Writes run one at a time in enqueue order on the running event loop.
    Failures are logged and counted; nothing is rolled back or retried.
    """

    def __init__(self, label: str):
        self.label = label
        self.failures = 0
        self.completed = 0
        self._pending: deque[PendingWrite] = deque()
        self._drain_task: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def enqueue(self, description: str, action: Callable[[], Awaitable[None]]) -> None:
        self._pending.append(PendingWrite(description=description, action=action))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[{}] no running loop, holding '{}' until flush", self.label, description)
            return
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending:
            write = self._pending.popleft()
            try:
                await write.action()
            except Exception:
                self.failures += 1
                logger.exception("[{}] durable write failed: {}", self.label, write.description)
            else:
                self.completed += 1

    async def flush(self) -> None:
        """Wait until every pending write has run.

        Draining always goes through the single drain task, so writes enqueued
        while a flush is in flight still run after the ones before them.
        """
        while self._pending or (self._drain_task is not None and not self._drain_task.done()):
            if self._drain_task is None or self._drain_task.done():
                self._drain_task = asyncio.get_running_loop().create_task(self._drain())
            await self._drain_task
