from dataclasses import dataclass, field
from typing import Any, Protocol

from motor.motor_asyncio import AsyncIOMotorDatabase

from wordbank.models.progress import ProgressRecord
from wordbank.models.vocab import VocabularyItem
from wordbank.utils.time import now_local


@dataclass
class CatalogSnapshot:
    """Raw stored documents for one learner; normalized by the scheduler on load."""

    items: list[dict[str, Any]] = field(default_factory=list)
    progress: list[dict[str, Any]] = field(default_factory=list)
    starterSeeded: bool = False


class PersistenceAdapter(Protocol):
    async def load_catalog_and_progress(self, user_id: str) -> CatalogSnapshot: ...

    async def mark_starter_seeded(self, user_id: str) -> None: ...

    async def save_item(self, user_id: str, item: VocabularyItem, progress: ProgressRecord) -> None: ...

    async def delete_item(self, user_id: str, item_id: str) -> None: ...

    async def load_checkpoint(self, user_id: str) -> dict[str, Any] | None: ...

    async def save_checkpoint(self, user_id: str, checkpoint: dict[str, Any]) -> None: ...

    async def clear_checkpoint(self, user_id: str) -> None: ...


class MongoPersistenceAdapter:
    """One ``words`` document per (user, item) holding both the item and its progress."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def load_catalog_and_progress(self, user_id: str) -> CatalogSnapshot:
        docs = await self._db.words.find({"userId": user_id}).sort("_id", 1).to_list(length=None)
        snapshot = CatalogSnapshot()
        for doc in docs:
            word = doc.get("word")
            if isinstance(word, dict) and word.get("id"):
                snapshot.items.append(word)
            progress = doc.get("progress")
            if isinstance(progress, dict):
                snapshot.progress.append({"itemId": doc.get("itemId"), **progress})

        learner = await self._db.learners.find_one({"userId": user_id})
        snapshot.starterSeeded = bool(learner and learner.get("starterSeeded"))
        return snapshot

    async def mark_starter_seeded(self, user_id: str) -> None:
        await self._db.learners.update_one(
            {"userId": user_id},
            {"$set": {"starterSeeded": True, "updatedAt": now_local()}},
            upsert=True,
        )

    async def save_item(self, user_id: str, item: VocabularyItem, progress: ProgressRecord) -> None:
        await self._db.words.update_one(
            {"userId": user_id, "itemId": item.id},
            {
                "$set": {
                    "word": item.to_doc(),
                    "progress": progress.to_doc(),
                    "updatedAt": now_local(),
                },
            },
            upsert=True,
        )

    async def delete_item(self, user_id: str, item_id: str) -> None:
        await self._db.words.delete_one({"userId": user_id, "itemId": item_id})

    async def load_checkpoint(self, user_id: str) -> dict[str, Any] | None:
        doc = await self._db.challenge_checkpoints.find_one({"userId": user_id})
        if not doc:
            return None
        return doc.get("checkpoint") or None

    async def save_checkpoint(self, user_id: str, checkpoint: dict[str, Any]) -> None:
        await self._db.challenge_checkpoints.update_one(
            {"userId": user_id},
            {"$set": {"checkpoint": checkpoint, "updatedAt": now_local()}},
            upsert=True,
        )

    async def clear_checkpoint(self, user_id: str) -> None:
        await self._db.challenge_checkpoints.delete_one({"userId": user_id})
