"""User API routes."""
from fastapi import APIRouter

from skillswap.api.users import routes_users

router = APIRouter()

router.include_router(routes_users.router, tags=["users"])
