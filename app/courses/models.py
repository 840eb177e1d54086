from pydantic import BaseModel, Field
from enum import Enum

# ==================== ENUMS ====================

class DifficultyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

# ==================== ENROLLMENT MODELS ====================

class EnrollmentCreate(BaseModel):
    course_id: str = Field(..., alias="id")
    user_id: str = Field(..., alias="userID")

    class Config:
        populate_by_name = True
