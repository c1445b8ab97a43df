"""Model registry record: one configured chat-completion model."""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from fitcoach.db.database import Base
from fitcoach.models.enums import ProviderType


class AiModel(Base):
    """A selectable AI model.

    ``usage_count`` only ever grows; the router bumps it (and ``updated_at``)
    after every successful call, which makes ``(usage_count, updated_at, id)``
    a least-recently-used ordering.
    """
    __tablename__ = "ai_models"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, unique=True)
    type = Column(String(20), nullable=False, default=ProviderType.GEMINI.value)
    # NULL is treated as enabled, rows created before the flag existed stay selectable.
    enabled = Column(Boolean, nullable=True, default=True)
    usage_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ai_models_selection", "usage_count", "updated_at", "id"),
    )

    def __repr__(self):
        return f"<AiModel(id={self.id}, name={self.name!r}, type={self.type}, usage={self.usage_count})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "enabled": self.enabled if self.enabled is not None else True,
            "usageCount": self.usage_count or 0,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
