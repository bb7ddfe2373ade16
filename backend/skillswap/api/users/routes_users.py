"""User API routes."""
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.api.deps import get_db
from skillswap.domain.users.models import User
from skillswap.domain.users.services import UserService
from skillswap.infra.db.repositories.user_repo import UserRepositoryImpl

logger = logging.getLogger(__name__)

router = APIRouter()


class UserCreateRequest(BaseModel):
    """User registration payload."""
    email: EmailStr
    name: str
    skills: List[str] = []


class UserResponse(BaseModel):
    """User response."""
    id: str
    email: str
    name: str
    skills: List[str]
    is_active: bool
    created_at: datetime


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        skills=user.skills,
        is_active=user.is_active,
        created_at=user.created_at,
    )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(request: UserCreateRequest, db: AsyncSession = Depends(get_db)):
    """Register a user."""
    service = UserService(UserRepositoryImpl(db))
    user = await service.create_user(request.email, request.name, request.skills)
    logger.info("[USERS] created id=%s", user.id)
    return _user_response(user)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get a user."""
    service = UserService(UserRepositoryImpl(db))
    return _user_response(await service.get_user(user_id))
