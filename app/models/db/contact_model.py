from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.database import Base


class ContactModel(Base):
    """SQLAlchemy model for contacts table (directed address-book edges)."""

    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("user_id", "contact_id", name="uq_contact_edge"),
        CheckConstraint("user_id <> contact_id", name="ck_contact_not_self"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    contact_id = Column(String(255), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    # Relationships
    contact = relationship("UserModel", foreign_keys=[contact_id])
