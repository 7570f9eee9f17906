"""
Pytest configuration and shared fixtures.

An in-memory persistence adapter and a controllable clock stand in for
MongoDB and wall time so the scheduler can be exercised without a database.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from wordbank.models.progress import ProgressRecord
from wordbank.models.vocab import ExampleSentence, VocabularyItem
from wordbank.services.persistence import CatalogSnapshot
from wordbank.services.scheduler import Scheduler
from wordbank.services.srs_sm2 import initial_progress
from wordbank.services.stores import ProgressStore, WordStore

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: float = 0, hours: float = 0) -> datetime:
        self.now = self.now + timedelta(days=days, hours=hours)
        return self.now


class FakeAdapter:
    """Dict-backed PersistenceAdapter that records every call it receives."""

    def __init__(self, items: list[dict[str, Any]] | None = None, progress: list[dict[str, Any]] | None = None):
        self.items: dict[str, dict[str, Any]] = {doc["id"]: doc for doc in items or []}
        self.progress: dict[str, dict[str, Any]] = {doc["itemId"]: doc for doc in progress or []}
        self.checkpoint: dict[str, Any] | None = None
        self.starter_seeded = False
        self.calls: list[tuple[str, str]] = []
        self.fail_saves = False

    async def load_catalog_and_progress(self, user_id: str) -> CatalogSnapshot:
        self.calls.append(("load", user_id))
        return CatalogSnapshot(
            items=list(self.items.values()),
            progress=list(self.progress.values()),
            starterSeeded=self.starter_seeded,
        )

    async def mark_starter_seeded(self, user_id: str) -> None:
        self.calls.append(("mark_starter_seeded", user_id))
        self.starter_seeded = True

    async def save_item(self, user_id: str, item: VocabularyItem, progress: ProgressRecord) -> None:
        self.calls.append(("save", item.id))
        if self.fail_saves:
            raise ConnectionError("store unavailable")
        self.items[item.id] = item.to_doc()
        self.progress[item.id] = progress.to_doc()

    async def delete_item(self, user_id: str, item_id: str) -> None:
        self.calls.append(("delete", item_id))
        self.items.pop(item_id, None)
        self.progress.pop(item_id, None)

    async def load_checkpoint(self, user_id: str) -> dict[str, Any] | None:
        return self.checkpoint

    async def save_checkpoint(self, user_id: str, checkpoint: dict[str, Any]) -> None:
        self.calls.append(("save_checkpoint", user_id))
        self.checkpoint = checkpoint

    async def clear_checkpoint(self, user_id: str) -> None:
        self.calls.append(("clear_checkpoint", user_id))
        self.checkpoint = None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sample_items():
    return [
        VocabularyItem(id="w1", sourceText="alma", targetText="りんご"),
        VocabularyItem(
            id="w2",
            sourceText="kutya",
            targetText="犬",
            example=ExampleSentence(sentence="A kutya ugat.", translation="犬が吠える。"),
        ),
        VocabularyItem(id="w3", sourceText="ház", targetText="家"),
        VocabularyItem(
            id="w4",
            sourceText="könyv",
            targetText="本",
            contextTag="seen in chat",
            example=ExampleSentence(sentence="Olvasok egy könyvet.", translation="本を読んでいます。"),
        ),
        VocabularyItem(id="w5", sourceText="víz", targetText="水"),
    ]


@pytest.fixture
def make_scheduler(clock, rng, sample_items):
    def _make(items=None, adapter=None) -> Scheduler:
        catalog = sample_items if items is None else items
        return Scheduler(
            user_id="learner-1",
            words=WordStore(catalog),
            progress=ProgressStore([initial_progress(item.id, clock()) for item in catalog]),
            adapter=adapter,
            rng=rng,
            clock=clock,
        )

    return _make
