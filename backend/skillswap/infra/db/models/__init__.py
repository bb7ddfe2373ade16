"""Database models."""
from skillswap.infra.db.models.user import UserModel
from skillswap.infra.db.models.swap import (
    SwapRequestModel,
    SwapRequestInteractionModel,
    InteractionUpdateModel,
)

__all__ = [
    "UserModel",
    "SwapRequestModel",
    "SwapRequestInteractionModel",
    "InteractionUpdateModel",
]
