"""
Tests for the per-learner scheduler cache.
"""

import asyncio
import random

import pytest

from conftest import FakeAdapter
from wordbank.services.registry import SchedulerRegistry


def _registry(adapters, max_users):
    def factory():
        return adapters.setdefault("shared", FakeAdapter())

    return SchedulerRegistry(
        adapter_factory=factory,
        seed_starter=False,
        rng_factory=lambda: random.Random(0),
        max_users=max_users,
    )


@pytest.mark.asyncio
async def test_same_learner_gets_the_same_scheduler():
    adapters = {}
    registry = _registry(adapters, max_users=5)

    first, second = await asyncio.gather(registry.get("u1"), registry.get("u1"))

    assert first is second
    assert adapters["shared"].calls.count(("load", "u1")) == 1


@pytest.mark.asyncio
async def test_least_recently_used_learner_is_evicted_and_flushed():
    adapters = {}
    registry = _registry(adapters, max_users=2)

    u1 = await registry.get("u1")
    u1.add_item("alma", "りんご")
    await registry.get("u2")
    await registry.get("u1")
    await registry.get("u3")

    assert len(registry) == 2
    assert "u2" not in registry
    assert "u1" in registry and "u3" in registry

    u4_first = await registry.get("u4")
    assert "u1" not in registry
    assert u1.writes.pending == 0
    assert any(doc["sourceText"] == "alma" for doc in adapters["shared"].items.values())

    await registry.get("u1")
    assert adapters["shared"].calls.count(("load", "u1")) == 2
    assert u4_first is await registry.get("u4")
