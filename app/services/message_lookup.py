"""
마지막 메시지 조회 (MongoDB)
"""

from typing import Optional, Protocol
from pymongo import DESCENDING

from app.models.messages import Message
from app.schemas.relationship import LastMessage


class LastMessageLookup(Protocol):
    """두 사용자 간 마지막 메시지 조회"""

    async def get_last_message(self, owner_id: int, peer_id: int) -> Optional[LastMessage]:
        ...


def to_last_message(message: Message) -> LastMessage:
    return LastMessage(
        id=str(message.id) if message.id is not None else None,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        content=message.content,
        message_type=message.message_type,
        created_at=message.created_at
    )


class MongoLastMessageLookup:
    """Beanie Message 문서에서 양방향 최신 메시지 조회"""

    async def get_last_message(self, owner_id: int, peer_id: int) -> Optional[LastMessage]:
        message = await Message.find(
            {
                "$or": [
                    {"sender_id": owner_id, "receiver_id": peer_id},
                    {"sender_id": peer_id, "receiver_id": owner_id},
                ]
            }
        ).sort([("created_at", DESCENDING)]).first_or_none()

        if message is None:
            return None
        return to_last_message(message)
