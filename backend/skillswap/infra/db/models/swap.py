"""Swap database models."""
from datetime import datetime
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from skillswap.domain.swap.models import (
    InteractionStatus,
    InteractionUpdate,
    SwapRequest,
    SwapRequestInteraction,
    SwapRequestStatus,
)
from skillswap.infra.db.base import Base
from skillswap.infra.db.models.user import JSONType


def _in_clause(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class SwapRequestModel(Base):
    """Swap request model - a published "I need X" offer that others respond to."""

    __tablename__ = "swap_requests"

    id = Column(String, primary_key=True)
    created_by = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    service_title = Column(String, nullable=False)
    service_required = Column(String, nullable=False)
    service_description = Column(Text, nullable=True)
    categories = Column(JSONType, nullable=True)  # Array of category names
    request_status = Column(String, default=SwapRequestStatus.OPEN.value, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    creator = relationship("UserModel", backref="swap_requests")
    interactions = relationship(
        "SwapRequestInteractionModel",
        back_populates="swap_request",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(_in_clause("request_status", SwapRequestStatus), name="ck_swap_request_status"),
        Index("ix_swap_requests_created_by", "created_by"),
    )

    def to_entity(self) -> SwapRequest:
        """Convert to domain entity."""
        return SwapRequest(
            id=self.id,
            created_by=self.created_by,
            service_title=self.service_title,
            service_required=self.service_required,
            service_description=self.service_description,
            categories=list(self.categories or []),
            request_status=SwapRequestStatus(self.request_status),
            created_at=self.created_at,
            updated_at=self.updated_at,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_entity(cls, entity: SwapRequest) -> "SwapRequestModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            created_by=entity.created_by,
            service_title=entity.service_title,
            service_required=entity.service_required,
            service_description=entity.service_description,
            categories=list(entity.categories),
            request_status=entity.request_status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            completed_at=entity.completed_at,
        )


class SwapRequestInteractionModel(Base):
    """Interaction model - one user's response thread on a swap request."""

    __tablename__ = "swap_request_interactions"

    id = Column(String, primary_key=True)
    swap_request_id = Column(String, ForeignKey("swap_requests.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, default="", nullable=False)
    status = Column(String, default=InteractionStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    swap_request = relationship("SwapRequestModel", back_populates="interactions")
    user = relationship("UserModel", backref="swap_interactions")
    updates = relationship(
        "InteractionUpdateModel",
        back_populates="interaction",
        order_by="InteractionUpdateModel.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(_in_clause("status", InteractionStatus), name="ck_interaction_status"),
        Index("ix_swap_request_interactions_swap_request_id", "swap_request_id"),
        Index("ix_swap_request_interactions_user_id", "user_id"),
    )

    def to_entity(self) -> SwapRequestInteraction:
        """Convert to domain entity. Expects updates to be eagerly loaded."""
        return SwapRequestInteraction(
            id=self.id,
            swap_request_id=self.swap_request_id,
            user_id=self.user_id,
            message=self.message or "",
            status=InteractionStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
            updates=[update.to_entity() for update in self.updates],
        )

    @classmethod
    def from_entity(cls, entity: SwapRequestInteraction) -> "SwapRequestInteractionModel":
        """Create from domain entity (updates are appended separately)."""
        return cls(
            id=entity.id,
            swap_request_id=entity.swap_request_id,
            user_id=entity.user_id,
            message=entity.message,
            status=entity.status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


class InteractionUpdateModel(Base):
    """Interaction update model - append-only log rows; id gives insertion order."""

    __tablename__ = "swap_request_interaction_updates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interaction_id = Column(
        String,
        ForeignKey("swap_request_interactions.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    message = Column(Text, nullable=False)
    title = Column(String, nullable=True)
    percentage = Column(Integer, nullable=True)
    client_token = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    interaction = relationship("SwapRequestInteractionModel", back_populates="updates")

    __table_args__ = (
        UniqueConstraint("interaction_id", "client_token", name="uq_interaction_update_client_token"),
        CheckConstraint(
            "percentage IS NULL OR (percentage >= 0 AND percentage <= 100)",
            name="ck_interaction_update_percentage",
        ),
        Index("ix_swap_request_interaction_updates_interaction_id", "interaction_id"),
    )

    def to_entity(self) -> InteractionUpdate:
        """Convert to domain entity."""
        return InteractionUpdate(
            id=self.id,
            interaction_id=self.interaction_id,
            user_id=self.user_id,
            message=self.message,
            title=self.title,
            percentage=self.percentage,
            client_token=self.client_token,
            created_at=self.created_at,
        )
