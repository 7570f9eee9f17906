from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from wordbank.config import get_settings, validate_mongo_settings

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        settings = validate_mongo_settings(get_settings())
        _client = AsyncIOMotorClient(
            settings.mongo_url,
            serverSelectionTimeoutMS=5000,
            tz_aware=True,
        )
    return _client


def get_db() -> AsyncIOMotorDatabase:
    global _db
    if _db is None:
        settings = validate_mongo_settings(get_settings())
        _db = get_client()[settings.mongo_db]
    return _db


async def ping_db() -> None:
    await get_client().admin.command("ping")


async def create_indexes() -> None:
    db = get_db()
    await db.words.create_index(
        [("userId", ASCENDING), ("itemId", ASCENDING)],
        unique=True,
        name="uq_words_user_item",
    )
    await db.words.create_index(
        [("userId", ASCENDING), ("progress.nextReviewDate", ASCENDING)],
        name="idx_words_user_next_review",
    )
    await db.words.create_index([("updatedAt", DESCENDING)], name="idx_words_updated")
    await db.challenge_checkpoints.create_index([("userId", ASCENDING)], unique=True, name="uq_checkpoints_user")
    await db.learners.create_index([("userId", ASCENDING)], unique=True, name="uq_learners_user")
