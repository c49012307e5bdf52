from pydantic import Field

from .base import ApiModel


class AddContactRequest(ApiModel):
    """Request model for adding a contact by handle or email."""

    username: str = Field(..., min_length=1, description="Username or email")
