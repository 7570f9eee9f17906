import asyncio
import random
from collections import OrderedDict
from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from loguru import logger

from wordbank.config import get_settings
from wordbank.db import get_db
from wordbank.services.persistence import MongoPersistenceAdapter, PersistenceAdapter
from wordbank.services.scheduler import Scheduler


class SchedulerRegistry:
    """Lazily loaded scheduler per learner, least recently used evicted first.

    An evicted scheduler has its pending writes flushed; the learner is loaded
    again from the store on the next request.
    """

    def __init__(
        self,
        adapter_factory: Callable[[], PersistenceAdapter],
        seed_starter: bool = True,
        rng_factory: Callable[[], random.Random] = random.Random,
        max_users: int = 1000,
    ):
        self._adapter_factory = adapter_factory
        self._seed_starter = seed_starter
        self._rng_factory = rng_factory
        self._max_users = max(1, max_users)
        self._schedulers: OrderedDict[str, Scheduler] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._schedulers)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._schedulers

    async def get(self, user_id: str) -> Scheduler:
        scheduler = self._schedulers.get(user_id)
        if scheduler is not None:
            self._schedulers.move_to_end(user_id)
            return scheduler

        lock = self._locks.setdefault(user_id, asyncio.Lock())
        try:
            async with lock:
                scheduler = self._schedulers.get(user_id)
                if scheduler is None:
                    scheduler = await Scheduler.load(
                        user_id,
                        self._adapter_factory(),
                        rng=self._rng_factory(),
                        seed_starter=self._seed_starter,
                    )
                    self._schedulers[user_id] = scheduler
        finally:
            if not lock.locked():
                self._locks.pop(user_id, None)

        await self._evict_overflow()
        return scheduler

    async def _evict_overflow(self) -> None:
        while len(self._schedulers) > self._max_users:
            user_id, scheduler = self._schedulers.popitem(last=False)
            logger.debug("Evicting scheduler for user {}", user_id)
            await self._flush_one(user_id, scheduler)

    async def flush_all(self) -> None:
        for user_id, scheduler in list(self._schedulers.items()):
            await self._flush_one(user_id, scheduler)

    @staticmethod
    async def _flush_one(user_id: str, scheduler: Scheduler) -> None:
        await scheduler.flush()
        if scheduler.writes.failures:
            logger.warning("User {} had {} failed durable writes", user_id, scheduler.writes.failures)


@lru_cache(maxsize=1)
def get_registry() -> SchedulerRegistry:
    settings = get_settings()
    return SchedulerRegistry(
        adapter_factory=lambda: MongoPersistenceAdapter(get_db()),
        seed_starter=settings.seed_starter,
        max_users=settings.max_cached_users,
    )


async def current_scheduler(
    x_user_id: str = Header(default="", alias="X-User-Id"),
    registry: SchedulerRegistry = Depends(get_registry),
) -> Scheduler:
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing X-User-Id header")
    return await registry.get(user_id)
