# Repository classes for database operations
from .base_repository import BaseRepository
from .contact_repository import ContactRepository
from .conversation_repository import ConversationRepository
from .member_repository import MemberRepository
from .message_repository import MessageRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ContactRepository",
    "ConversationRepository",
    "MemberRepository",
    "MessageRepository",
    "UserRepository",
]
