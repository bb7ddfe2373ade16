"""User domain models."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr

from skillswap.domain.common.types import generate_id, utcnow


class User(BaseModel):
    """User domain model."""

    id: str
    email: EmailStr
    name: str
    skills: list[str] = []
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, email: EmailStr, name: str, skills: Optional[list[str]] = None) -> "User":
        """Create a new user."""
        now = utcnow()
        return cls(
            id=generate_id(),
            email=email,
            name=name,
            skills=skills or [],
            is_active=True,
            created_at=now,
            updated_at=now,
        )
