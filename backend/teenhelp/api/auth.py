"""Auth API — register, login, logout, profile and role management."""
from __future__ import annotations
import logging
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from jose import JWTError, jwt

from teenhelp.api.common import envelope, unwrap
from teenhelp.container import get_user_repo
from teenhelp.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from teenhelp.domain.common.permissions import MANAGE_USERS, Caller, has_capability
from teenhelp.domain.user.models import User
from teenhelp.domain.user.rules import NOT_APPLIED, validate_registration, validate_role
from teenhelp.persistence.interfaces.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_bearer = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------
# Password hashing (Direct bcrypt to avoid passlib compatibility issues)
# ------------------------------------------------------------------
def hash_password(password: str) -> str:
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8")
        )
    except ValueError:
        # malformed stored hash
        return False


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class RegisterRequest(BaseModel):
    username: str
    password: str
    display_name: Optional[str] = None
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class ProfileUpdateRequest(BaseModel):
    display_name: Optional[str] = None
    email: Optional[str] = None


class RoleChangeRequest(BaseModel):
    role: str
    user_type: Optional[str] = None


# ------------------------------------------------------------------
# JWT helpers
# ------------------------------------------------------------------
def _create_token(user: User) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": user.id,
        "username": user.username,
        "role": user.role,
        "user_type": user.user_type,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def _decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")


# ------------------------------------------------------------------
# Dependencies: current user from Bearer token
# ------------------------------------------------------------------
def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> dict:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return _decode_token(credentials.credentials)


def get_current_caller(
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
) -> Caller:
    # role claims in the token may be stale; permissions follow the stored account
    user = users.get_by_id(current_user["sub"])
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    return user.as_caller()


# ------------------------------------------------------------------
# Serializer
# ------------------------------------------------------------------
def _serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "user_type": user.user_type,
        "display_name": user.display_name,
        "email": user.email,
        "is_verified": user.is_verified,
        "expert_status": user.expert_application.status if user.expert_application else NOT_APPLIED,
        "stats": {
            "answers_count": user.stats.answers_count,
            "helpful_votes": user.stats.helpful_votes,
        },
    }


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------
@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, users: UserRepository = Depends(get_user_repo)):
    username = unwrap(validate_registration(body.username, body.password))
    if users.get_by_username(username):
        raise HTTPException(status_code=400, detail="Username is already taken")

    user = User(
        id=str(uuid.uuid4()),
        username=username,
        password_hash=hash_password(body.password),
        display_name=body.display_name,
        email=body.email,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    try:
        users.add(user)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=400, detail="Username is already taken")
    return envelope(
        {"token": _create_token(user), "user": _serialize_user(user)},
        message="Registration successful",
    )


@router.post("/login")
def login(body: LoginRequest, users: UserRepository = Depends(get_user_repo)):
    user = users.get_by_username(body.username)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return envelope({"token": _create_token(user), "user": _serialize_user(user)})


@router.post("/logout")
def logout(current_user: dict = Depends(get_current_user)):
    # Stateless JWT — just acknowledge. Client discards token.
    return envelope(message="Logged out successfully")


@router.get("/profile")
def get_profile(
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
):
    user = users.get_by_id(current_user["sub"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return envelope(_serialize_user(user))


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repo),
):
    users.update_profile(current_user["sub"], body.display_name, body.email)
    return envelope(message="Profile updated")


@router.put("/users/{user_id}/role")
def change_role(
    user_id: str,
    body: RoleChangeRequest,
    caller: Caller = Depends(get_current_caller),
    users: UserRepository = Depends(get_user_repo),
):
    if not has_capability(caller, MANAGE_USERS):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change roles")
    role = unwrap(validate_role(body.role))
    if not users.update_role(user_id, role, body.user_type):
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("User %s is now '%s' (type %s), changed by %s", user_id, role, body.user_type, caller.id)
    return envelope(_serialize_user(users.get_by_id(user_id)), message="Role updated")
