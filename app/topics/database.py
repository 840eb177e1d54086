import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import serialize_mongo, serialize_many
from app.core.errors import NotFoundError

logger = logging.getLogger(__name__)


async def resolve_topic_id(db: AsyncIOMotorDatabase, topic_title: str, stamp: int) -> int:
    """Subtopics of one title share a topic_id, the first one mints it"""
    existing = await db.topics.find_one({"topic_title": topic_title})
    if existing:
        return existing["topic_id"]
    # Two titles created in the same millisecond must not share an id
    while await db.topics.find_one({"topic_id": stamp}):
        stamp += 1
    return stamp


async def create_topic(
    db: AsyncIOMotorDatabase,
    topic_title: str,
    sub_topic_title: str,
    sub_topic_content: str = None,
    topic_id: Optional[int] = None,
) -> dict:
    now = datetime.utcnow()
    stamp = int(now.timestamp() * 1000)
    topic_title = topic_title.strip()
    if topic_id is None:
        topic_id = await resolve_topic_id(db, topic_title, stamp)

    topic = {
        "topic_id": topic_id,
        "subtopic_id": stamp,
        "topic_title": topic_title,
        "sub_topic_title": sub_topic_title.strip(),
        "sub_topic_content": sub_topic_content,
        "created_at": now,
    }
    await db.topics.insert_one(topic)
    logger.info("Subtopic %r added under topic %s (%r)", topic["sub_topic_title"], topic_id, topic_title)
    return serialize_mongo(topic)


async def list_topic_titles(db: AsyncIOMotorDatabase) -> List[str]:
    titles = await db.topics.distinct("topic_title")
    if not titles:
        raise NotFoundError("No topics found")
    return titles


async def list_subtopics(db: AsyncIOMotorDatabase, topic_id: int) -> List[dict]:
    cursor = db.topics.find({"topic_id": topic_id}).sort([("subtopic_id", 1), ("_id", 1)])
    return serialize_many(await cursor.to_list(length=None))
