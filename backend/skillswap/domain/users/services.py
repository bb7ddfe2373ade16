"""User domain services."""
from typing import Protocol, Optional

from skillswap.domain.users.models import User
from skillswap.domain.common.errors import NotFoundError, ValidationError


class UserRepository(Protocol):
    """User repository protocol."""

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        ...


class UserService:
    """User service."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def create_user(self, email: str, name: str, skills: Optional[list[str]] = None) -> User:
        """Create a new user."""
        if not name or not name.strip():
            raise ValidationError("Name is required")
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise ValidationError("Email already registered")
        user = User.create(email=email, name=name.strip(), skills=skills)
        return await self.user_repo.create(user)

    async def get_user(self, user_id: str) -> User:
        """Get user by ID."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user
