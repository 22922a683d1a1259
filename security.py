import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from pymongo.database import Database

import settings
from database import get_db, oid
from schemas import Role

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    minutes = settings.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def token_for(user: dict) -> str:
    return create_token({"id": str(user["_id"]), "role": user.get("role", Role.user.value)})


class AuthUser(BaseModel):
    id: str
    role: Role = Role.user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


def public_user(user: dict) -> dict:
    """User document as returned by the API, without the password hash."""
    out = {
        "id": str(user["_id"]),
        "username": user["username"],
        "email": user["email"],
        "first_name": user.get("first_name"),
        "last_name": user.get("last_name"),
        "address": user.get("address"),
        "phone": user.get("phone"),
        "profile_image": user.get("profile_image"),
        "role": user.get("role", Role.user.value),
    }
    if user.get("created_at"):
        out["created_at"] = user["created_at"].isoformat()
    return out


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Database = Depends(get_db),
) -> AuthUser:
    if not authorization:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid auth scheme")
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    try:
        user_key = oid(user_id)
    except HTTPException:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    # Role comes from the stored user, not the token, so role changes apply immediately
    user = db["user"].find_one({"_id": user_key})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return AuthUser(
        id=str(user["_id"]),
        role=user.get("role", Role.user.value),
    )


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_admin:
        logger.warning("Admin route refused for user %s", user.id)
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
