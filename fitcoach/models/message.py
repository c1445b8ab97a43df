"""Persisted chat messages (assistant conversations and generation transcripts)."""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from fitcoach.db.database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Points into workout_plans or diet_plans depending on plan_type.
    plan_id = Column(Integer, nullable=True)
    plan_type = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    model = Column(String(200), nullable=True)
    rating = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_messages_user_created", "user_id", "created_at"),
        Index("ix_messages_plan", "plan_id", "plan_type"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "planId": self.plan_id,
            "planType": self.plan_type,
            "role": self.role,
            "content": self.content,
            "model": self.model,
            "rating": self.rating,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
