from datetime import datetime
from typing import Optional

from .base import ApiModel


class UserResponse(ApiModel):
    """Response model for user data."""

    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
