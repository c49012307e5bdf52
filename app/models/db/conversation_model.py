from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from app.database import Base


class ConversationModel(Base):
    """SQLAlchemy model for conversations table."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Null for direct chats; clients display the other member's name instead
    name = Column(String(255))
    is_group = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    # Relationships
    messages = relationship("MessageModel", back_populates="conversation")
    members = relationship("MemberModel", back_populates="conversation")
