import logging
import re
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.auth import hash_password, verify_password, create_access_token
from app.core.database import generate_id, serialize_mongo
from app.core.errors import ConflictError, ValidationError
from app.users.models import UserRegister

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^([\w\-.]+)@([\w\-.]+)\.([a-zA-Z]{2,5})$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


def public_user(doc: dict) -> dict:
    """User record as returned to clients, without the password hash"""
    doc = serialize_mongo(dict(doc))
    doc.pop("password_hash", None)
    return doc


async def is_email_in_use(db: AsyncIOMotorDatabase, email: str) -> bool:
    return await db.users.find_one({"email": email}) is not None


async def is_username_in_use(db: AsyncIOMotorDatabase, username: str) -> bool:
    return await db.users.find_one({"username": username}) is not None


async def register_user(db: AsyncIOMotorDatabase, data: UserRegister) -> dict:
    username = data.username.strip()
    email = data.email.strip()

    if not username:
        raise ValidationError("Username is required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email")

    if await is_email_in_use(db, email):
        raise ConflictError("Email already in use")
    if await is_username_in_use(db, username):
        raise ConflictError("Username already in use")

    now = datetime.utcnow()
    user = {
        "user_id": generate_id("USR"),
        "username": username,
        "email": email,
        "password_hash": hash_password(data.password),
        "first_name": data.first_name,
        "last_name": data.last_name,
        "created_at": now,
        "updated_at": now,
    }
    try:
        await db.users.insert_one(user)
    except DuplicateKeyError as e:
        # Lost a race with a concurrent register
        key = (e.details or {}).get("keyPattern", {})
        if "username" in key:
            raise ConflictError("Username already in use")
        raise ConflictError("Email already in use")
    logger.info("Registered user %s", user["user_id"])
    return public_user(user)


async def login_user(db: AsyncIOMotorDatabase, data: str, password: str) -> dict:
    """
    Log in with either an email or a username.
    Anything that is neither is treated as a bad credential.
    """
    query: Optional[dict] = None
    if EMAIL_PATTERN.match(data):
        query = {"email": data}
    elif USERNAME_PATTERN.match(data):
        query = {"username": data}

    user = await db.users.find_one(query) if query else None
    if not user or not verify_password(password, user.get("password_hash", "")):
        raise ValidationError("Password Incorrect")

    return {
        "user": public_user(user),
        "access_token": create_access_token(user["user_id"]),
        "token_type": "bearer",
    }
