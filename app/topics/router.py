from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, Field
from typing import Optional

from app.core.database import get_db
from app.core.errors import ok
from app.topics import database

router = APIRouter(prefix="/auth", tags=["Topics"])


class TopicCreate(BaseModel):
    topic_title: str = Field(..., alias="topicTitle", min_length=1)
    sub_topic_title: str = Field(..., alias="subTopicTitle", min_length=1)
    sub_topic_content: Optional[str] = Field(None, alias="subTopicContent")
    topic_id: Optional[int] = Field(None, alias="TopicId")

    class Config:
        populate_by_name = True


@router.post("/createtopics", status_code=201)
async def create_topic(data: TopicCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    topic = await database.create_topic(
        db, data.topic_title, data.sub_topic_title, data.sub_topic_content, topic_id=data.topic_id,
    )
    return ok("topic added successfully", topic)


@router.get("/topics")
async def get_topic_titles(db: AsyncIOMotorDatabase = Depends(get_db)):
    """Distinct topic titles"""
    return ok("Topics", await database.list_topic_titles(db))


@router.get("/topics/{topic_id}")
async def get_subtopics(topic_id: int, db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Subtopics", await database.list_subtopics(db, topic_id))
