import logging
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.api.conversations import (
    ConversationDetailResponse,
    ConversationResponse,
)
from app.models.api.users import UserResponse
from app.models.db.conversation_model import ConversationModel
from app.models.db.member_model import MemberModel
from app.repositories.base_repository import BaseRepository
from app.repositories.member_repository import MemberRepository

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[ConversationModel, ConversationResponse]):
    """Repository for conversation operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationModel)
        self.member_repo = MemberRepository(db)

    async def get_with_members(
        self, conversation_id: int
    ) -> Optional[ConversationDetailResponse]:
        """Get a conversation by ID with its member users loaded."""
        query = (
            select(self.model_class)
            .where(self.model_class.id == conversation_id)
            .options(
                selectinload(self.model_class.members).selectinload(MemberModel.user)
            )
        )  # type: ignore
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        if not db_model:
            return None

        members = sorted(db_model.members, key=lambda m: m.id)
        return ConversationDetailResponse(
            id=db_model.id,
            name=db_model.name,
            is_group=db_model.is_group,
            created_at=db_model.created_at,
            members=[UserResponse.model_validate(m.user) for m in members],
        )

    async def get_by_ids(
        self, conversation_ids: List[int]
    ) -> List[ConversationResponse]:
        """Get conversations by a list of IDs."""
        if not conversation_ids:
            return []
        query = select(self.model_class).where(
            self.model_class.id.in_(conversation_ids)
        )
        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    async def find_direct(
        self, user_id: str, participant_id: str
    ) -> Optional[ConversationResponse]:
        """Find the direct conversation whose members are exactly these two users."""
        user_conversations = select(MemberModel.conversation_id).where(
            MemberModel.user_id == user_id
        )
        participant_conversations = select(MemberModel.conversation_id).where(
            MemberModel.user_id == participant_id
        )
        two_members = (
            select(MemberModel.conversation_id)
            .group_by(MemberModel.conversation_id)
            .having(func.count(MemberModel.id) == 2)
        )
        query = (
            select(self.model_class)
            .where(
                self.model_class.is_group.is_(False),
                self.model_class.id.in_(user_conversations),
                self.model_class.id.in_(participant_conversations),
                self.model_class.id.in_(two_members),
            )
            .order_by(self.model_class.id)
            .limit(1)
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def create_direct(
        self, user_id: str, participant_id: str
    ) -> ConversationResponse:
        """Create a direct conversation and both memberships atomically."""
        db_model = self.model_class(is_group=False)
        try:
            self.db.add(db_model)
            # Flush to obtain the conversation id inside the same transaction
            await self.db.flush()
            self.member_repo.add_pending(db_model.id, user_id)
            self.member_repo.add_pending(db_model.id, participant_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(db_model)
        logger.info(
            "Created conversation %s for %s and %s",
            db_model.id,
            user_id,
            participant_id,
        )
        return self._to_pydantic(db_model)

    def _to_pydantic(self, db_model: Any) -> ConversationResponse:
        """Convert SQLAlchemy ConversationModel to Pydantic ConversationResponse."""
        return ConversationResponse(
            id=db_model.id,
            name=db_model.name,
            is_group=db_model.is_group,
            created_at=db_model.created_at,
        )
