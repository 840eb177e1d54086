import logging
from datetime import datetime
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.database import generate_id, serialize_mongo, serialize_many
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.courses.models import DifficultyLevel
from app.media.uploader import MediaStore

logger = logging.getLogger(__name__)

# ==================== COURSE CRUD ====================

async def is_course_title_in_use(db: AsyncIOMotorDatabase, title: str) -> bool:
    return await db.courses.find_one({"title": title}) is not None


async def create_course(
    db: AsyncIOMotorDatabase,
    media: MediaStore,
    course_data: dict,
    image: Tuple[bytes, Optional[str], str],
    video: Tuple[bytes, Optional[str], str],
) -> dict:
    """
    Create a course after pushing its image and video to the media host.
    `image` and `video` are (bytes, content_type, filename).
    """
    title = (course_data.get("title") or "").strip()
    if not title or not course_data.get("description"):
        raise ValidationError("Title and description are required.")

    if await is_course_title_in_use(db, title):
        raise ConflictError("Course already Exist")

    stamp = int(datetime.utcnow().timestamp() * 1000)
    image_bytes, image_type, image_name = image
    video_bytes, video_type, video_name = video
    image_link = await media.upload(
        image_bytes, image_type, resource_type="image",
        public_id=f"Course_{stamp}_image", filename=image_name,
    )
    video_link = await media.upload(
        video_bytes, video_type, resource_type="video",
        public_id=f"Course_{stamp}_video", filename=video_name,
    )

    now = datetime.utcnow()
    course = {
        "course_id": generate_id("COURSE"),
        "title": title,
        "description": course_data["description"],
        "level": DifficultyLevel(course_data.get("level") or DifficultyLevel.BEGINNER).value,
        "image_link": image_link,
        "video_link": video_link,
        "published": bool(course_data.get("published", False)),
        "user_id": course_data.get("user_id"),
        "created_at": now,
        "updated_at": now,
    }
    await db.courses.insert_one(course)
    logger.info("Course %s created by %s", course["course_id"], course["user_id"])
    return serialize_mongo(course)


async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await db.courses.find_one({"course_id": course_id})
    if not course:
        raise NotFoundError("Can't Find Course")
    return serialize_mongo(course)


async def list_courses(db: AsyncIOMotorDatabase, filters: Optional[dict] = None) -> List[dict]:
    cursor = db.courses.find(filters or {})
    return serialize_many(await cursor.to_list(length=None))

# ==================== ENROLLMENT CRUD ====================

async def enroll_user(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> Tuple[dict, bool]:
    """
    Enroll user in course.
    Returns (enrollment, created), enrolling twice hands back the first record.
    """
    if not user_id:
        raise ValidationError("userID is required")

    existing = await db.enrolled_courses.find_one({"course_id": course_id, "user_id": user_id})
    if existing:
        return serialize_mongo(existing), False

    enrollment = {
        "enrollment_id": generate_id("ENR"),
        "course_id": course_id,
        "user_id": user_id,
        "enrolled_at": datetime.utcnow(),
    }
    try:
        await db.enrolled_courses.insert_one(enrollment)
    except DuplicateKeyError:
        # A concurrent enroll got there first
        existing = await db.enrolled_courses.find_one({"course_id": course_id, "user_id": user_id})
        return serialize_mongo(existing), False
    logger.info("User %s enrolled in %s", user_id, course_id)
    return serialize_mongo(enrollment), True


async def get_user_enrollments(db: AsyncIOMotorDatabase, user_id: str) -> List[dict]:
    cursor = db.enrolled_courses.find({"user_id": user_id})
    return serialize_many(await cursor.to_list(length=None))
