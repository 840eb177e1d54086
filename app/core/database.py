import logging
import uuid
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import MONGO_URL, MONGO_DB_NAME
from app.submissions.models import KIND_CONFIGS

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def get_db_instance() -> AsyncIOMotorDatabase:
    """Shared database handle, the client is created on first use"""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(MONGO_URL)
    return _client[MONGO_DB_NAME]


async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_db_instance()


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12].upper()}"


def serialize_mongo(doc: dict) -> dict:
    if doc and "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_many(docs: list) -> list:
    return [serialize_mongo(doc) for doc in docs]


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create MongoDB indexes used by the lookups in this service"""

    # Users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("username", unique=True)
    await db.users.create_index("email", unique=True)

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("title")
    await db.courses.create_index("user_id")

    # Enrollments
    await db.enrolled_courses.create_index([("user_id", 1), ("course_id", 1)], unique=True)

    # Topics
    await db.topics.create_index([("topic_id", 1), ("subtopic_id", 1)])
    await db.topics.create_index("topic_title")

    # Submissions
    for config in KIND_CONFIGS.values():
        name = config.collection
        await db[name].create_index("submission_id", unique=True)
        await db[name].create_index("owner_id")
        await db[name].create_index([("course_id", 1), ("status", 1)])

    # Groups
    await db.groups.create_index("group_id")
    await db.groups.create_index("members")

    logger.info("Database indexes created")
