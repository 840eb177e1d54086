import logging
from datetime import datetime
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import serialize_mongo, serialize_many
from app.core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ==================== GROUP CRUD ====================

async def create_group(db: AsyncIOMotorDatabase, group_name: str, members: List[str]) -> dict:
    """
    Create a chat group. The id is the creation time in milliseconds and is
    not checked for uniqueness.
    """
    if not group_name or not group_name.strip():
        raise ValidationError("groupName is required")

    now = datetime.utcnow()
    group = {
        "group_id": int(now.timestamp() * 1000),
        "name": group_name.strip(),
        "members": list(dict.fromkeys(m for m in members if m)),
        "messages": [],
        "created_at": now,
    }
    await db.groups.insert_one(group)
    logger.info("Group %s (%s) created with %d member(s)", group["group_id"], group["name"], len(group["members"]))
    return serialize_mongo(group)


async def get_group(db: AsyncIOMotorDatabase, group_id: int) -> dict:
    group = await db.groups.find_one({"group_id": group_id})
    if not group:
        raise NotFoundError("Group not found")
    return serialize_mongo(group)


async def list_groups_for(db: AsyncIOMotorDatabase, member: str) -> List[dict]:
    cursor = db.groups.find({"members": member})
    return serialize_many(await cursor.to_list(length=None))


async def append_message(db: AsyncIOMotorDatabase, group_id: int, sender: str, content: str) -> dict:
    """Append one message to the group history, earlier messages are never touched"""
    if not sender:
        raise ValidationError("sender is required")

    message = {
        "sender": sender,
        "content": content,
        "timestamp": datetime.utcnow(),
    }
    result = await db.groups.update_one(
        {"group_id": group_id},
        {"$push": {"messages": message}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Group not found")
    return message
