import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import DomainError
from app.identity import get_acting_user
from app.models.api.contacts import AddContactRequest
from app.models.api.users import UserResponse
from app.routers.errors import INTERNAL_ERROR, to_http_exception
from app.services.contacts_service import ContactsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_contacts(
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    """List the users in the caller's address book."""
    try:
        service = ContactsService(db)
        return await service.get_contacts(user.id)
    except Exception:
        logger.exception("Listing contacts failed for %s", user.id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("", response_model=UserResponse, status_code=201)
async def add_contact(
    request: AddContactRequest,
    user: UserResponse = Depends(get_acting_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Add a user to the caller's contacts by username or email (idempotent)."""
    try:
        service = ContactsService(db)
        return await service.add_contact(user.id, request.username)
    except DomainError as e:
        raise to_http_exception(e)
    except Exception:
        logger.exception("Adding contact failed for %s", user.id)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
