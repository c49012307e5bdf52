# SQLAlchemy database models
from .contact_model import ContactModel
from .conversation_model import ConversationModel
from .member_model import MemberModel
from .message_model import MessageModel
from .user_model import UserModel

__all__ = [
    "ContactModel",
    "ConversationModel",
    "MemberModel",
    "MessageModel",
    "UserModel",
]
