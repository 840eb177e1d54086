from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import get_db
from app.core.errors import ok
from app.courses.models import EnrollmentCreate
from app.courses.database import enroll_user, get_course, get_user_enrollments

router = APIRouter(prefix="/auth", tags=["Enrollments"])


@router.post("/AddEnrolledCourse")
async def add_enrolled_course(data: EnrollmentCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Enroll a user in a course, enrolling twice is not an error"""
    await get_course(db, data.course_id)
    enrollment, created = await enroll_user(db, data.course_id, data.user_id)
    return ok("Course Enrolled" if created else "Course already Enrolled", enrollment)


@router.get("/getEnrolledCourse/{user_id}")
async def get_enrolled_courses(user_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return ok("Enrolled Courses", await get_user_enrollments(db, user_id))
