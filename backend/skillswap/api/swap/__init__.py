"""Swap API routes."""
from fastapi import APIRouter

from skillswap.api.swap import routes_swap

router = APIRouter()

router.include_router(routes_swap.router, tags=["swap"])
