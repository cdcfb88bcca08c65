from .users import User
from .relationships import Relationship, RelationshipStatus
from .messages import Message

__all__ = [
    "User",
    "Relationship",
    "RelationshipStatus",
    "Message",
]
