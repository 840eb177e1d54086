from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.database import get_db
from app.core.errors import ok
from app.users.models import UserRegister, UserLogin
from app.users import service

router = APIRouter(prefix="/auth", tags=["Users"])


@router.post("/register", status_code=201)
async def register(data: UserRegister, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Register a new user, username and email must be unused"""
    user = await service.register_user(db, data)
    return ok("User Registered", user)


@router.post("/login")
async def login(data: UserLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Log in by email or username"""
    result = await service.login_user(db, data.data, data.password)
    return ok("Login Successfully", result)
