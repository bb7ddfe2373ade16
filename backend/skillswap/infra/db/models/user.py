"""User database model."""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB

from skillswap.infra.db.base import Base
from skillswap.domain.users.models import User as UserEntity

# JSONB on postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    skills = Column(JSONType, nullable=True)  # Array of strings
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_entity(self) -> UserEntity:
        """Convert to domain entity."""
        return UserEntity(
            id=self.id,
            email=self.email,
            name=self.name,
            skills=list(self.skills or []),
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            email=entity.email,
            name=entity.name,
            skills=list(entity.skills),
            is_active=entity.is_active,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
