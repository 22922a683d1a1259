import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field, field_validator
from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, get_db, now, oid
from schemas import Role, User as UserSchema
from security import AuthUser, get_current_user, hash_password, public_user, token_for, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    @field_validator("username", "first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        # Passwords are left as typed
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value


@router.post("/register", status_code=201)
def register(req: RegisterRequest, db: Database = Depends(get_db)):
    email = req.email.lower()
    username = req.username
    existing = db["user"].find_one({"$or": [{"email": email}, {"username": username}]})
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")
    user_doc = UserSchema(
        username=username,
        email=email,
        password_hash=hash_password(req.password),
        first_name=req.first_name,
        last_name=req.last_name,
        role=Role.user,
    )
    user_id = create_document(db, "user", user_doc)
    user = db["user"].find_one({"_id": oid(user_id)})
    logger.info("Registered user %s (%s)", user_id, username)
    return {"message": "User registered successfully", "token": token_for(user), "user": public_user(user)}


@router.post("/login")
def login(req: LoginRequest, db: Database = Depends(get_db)):
    user = db["user"].find_one({"email": req.email.lower()})
    # Same answer for unknown email and wrong password
    if not user or not verify_password(req.password, user.get("password_hash", "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"message": "Login successful", "token": token_for(user), "user": public_user(user)}


@router.get("/profile")
def get_profile(user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    doc = db["user"].find_one({"_id": oid(user.id)})
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": public_user(doc)}


@router.put("/profile")
def update_profile(body: ProfileUpdate, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    update = body.model_dump(exclude_none=True)
    update["updated_at"] = now()
    doc = db["user"].find_one_and_update(
        {"_id": oid(user.id)},
        {"$set": update},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Profile updated successfully", "user": public_user(doc)}
