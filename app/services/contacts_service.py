import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgumentError, NotFoundError
from app.models.api.users import UserResponse
from app.repositories.contact_repository import ContactRepository
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class ContactsService:
    """Service for a user's address book."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.contact_repo = ContactRepository(db)
        self.user_repo = UserRepository(db)

    async def get_contacts(self, user_id: str) -> List[UserResponse]:
        return await self.contact_repo.get_contacts(user_id)

    async def add_contact(self, user_id: str, identifier: str) -> UserResponse:
        """
        Add a user to the caller's contacts by username or email.

        Adding an existing contact returns that contact unchanged.
        """
        if not identifier or not identifier.strip():
            raise InvalidArgumentError("Username is required", field="username")

        contact = await self.user_repo.get_by_identifier(identifier)
        if not contact:
            raise NotFoundError("User not found")
        if contact.id == user_id:
            raise InvalidArgumentError(
                "Cannot add yourself as a contact", field="username"
            )

        created = await self.contact_repo.add_edge(user_id, contact.id)
        if created:
            logger.info("User %s added contact %s", user_id, contact.id)
        return contact
