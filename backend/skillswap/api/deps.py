"""API dependencies."""
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.domain.swap.services import SwapService
from skillswap.domain.users.models import User
from skillswap.domain.users.services import UserRepository
from skillswap.infra.db.repositories.swap_repo import SwapRepositoryImpl
from skillswap.infra.db.repositories.user_repo import UserRepositoryImpl
from skillswap.infra.db.session import get_db
from skillswap.settings import settings

__all__ = ["get_db", "get_current_user", "get_swap_service"]


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the calling user from the X-User-Id header set by the gateway."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing or unknown X-User-Id",
    )
    if not x_user_id:
        raise credentials_exception

    user_repo: UserRepository = UserRepositoryImpl(db)
    user = await user_repo.get_by_id(x_user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def get_swap_service(db: AsyncSession = Depends(get_db)) -> SwapService:
    """Build the swap service over the request's session."""
    return SwapService(
        SwapRepositoryImpl(db),
        UserRepositoryImpl(db),
        max_message_length=settings.max_message_length,
    )
