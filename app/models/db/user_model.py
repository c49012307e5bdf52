from sqlalchemy import Column, DateTime, String, func

from app.database import Base


class UserModel(Base):
    """SQLAlchemy model for users table.

    Rows are owned by the identity provider; the chat core only reads them.
    """

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True)
    username = Column(String(255), unique=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    profile_image_url = Column(String(1024))
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(
        DateTime(timezone=True), default=func.now(), onupdate=func.now()
    )
