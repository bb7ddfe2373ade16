"""User repository implementation."""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from skillswap.domain.common.errors import ValidationError
from skillswap.domain.users.models import User
from skillswap.domain.users.services import UserRepository
from skillswap.infra.db.models.user import UserModel


class UserRepositoryImpl(UserRepository):
    """User repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = UserModel.from_entity(user)
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with another registration of the same email
            await self.session.rollback()
            raise ValidationError("Email already registered") from None
        await self.session.refresh(model)
        return model.to_entity()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        result = await self.session.execute(select(UserModel).where(UserModel.email == str(email)))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None
