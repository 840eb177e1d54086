"""
Password hashing, token issue and caller identity.

Identity is optional everywhere: routes receive `actor_id` (or None for an
anonymous caller) and hand it to whatever policy hook they are wired to.
"""

import hashlib
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Header
from jose import jwt, JWTError

from app.core.config import JWT_SECRET_KEY, JWT_ALGORITHM, JWT_EXPIRE_MINUTES
from app.core.errors import UnauthorizedError


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hash_password(password) == password_hash


def create_access_token(user_id: str, expires_minutes: int = JWT_EXPIRE_MINUTES) -> str:
    payload = {
        "sub": user_id,
        "exp": datetime.utcnow() + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or Expired Token")


async def get_actor_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Caller identity from a bearer token, None when no token is sent"""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1]
    return decode_access_token(token).get("sub")
