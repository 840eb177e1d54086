from fastapi import APIRouter, Depends, File, Form, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from app.core.database import get_db
from app.core.errors import ok, ValidationError
from app.courses.models import DifficultyLevel
from app.courses.database import create_course, get_course, list_courses
from app.media.uploader import MediaStore, get_media_store

router = APIRouter(prefix="/auth", tags=["Course Management"])


async def read_upload(upload: Optional[UploadFile]):
    if upload is None:
        return None
    data = await upload.read()
    if not data:
        return None
    return data, upload.content_type, upload.filename or "upload"

# ==================== COURSE CRUD ====================

@router.post("/addCourse", status_code=201)
async def add_course(
    title: str = Form(...),
    description: str = Form(...),
    lvlOfDiff: DifficultyLevel = Form(DifficultyLevel.BEGINNER),
    published: bool = Form(False),
    userId: Optional[str] = Form(None),
    imageLink: Optional[UploadFile] = File(None),
    videoLink: Optional[UploadFile] = File(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """
    Create a course.
    Multipart body, the image and video files are both required and are
    uploaded to the media host before the record is written.
    """
    image = await read_upload(imageLink)
    video = await read_upload(videoLink)
    if not image or not video:
        raise ValidationError("Both image and video files are required.")

    course = await create_course(
        db,
        media,
        {
            "title": title,
            "description": description,
            "level": lvlOfDiff,
            "published": published,
            "user_id": userId,
        },
        image,
        video,
    )
    return ok("Course Added", course)


@router.get("/getAllCourse")
async def get_all_courses(db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Courses", await list_courses(db))


@router.get("/getCourse/{course_id}")
async def get_one_course(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Course", await get_course(db, course_id))


@router.get("/getAllCourse/{user_id}")
async def get_courses_by_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Courses created by one user"""
    return ok("Courses", await list_courses(db, {"user_id": user_id}))
