from datetime import datetime
from beanie import Document
from pydantic import Field


class Message(Document):
    """1:1 메시지 (메시지 서비스 소유, 여기서는 마지막 메시지 조회에만 사용)"""
    sender_id: int = Field(..., description="User ID who sent the message")
    receiver_id: int = Field(..., description="User ID who received the message")
    content: str = Field(..., description="Message content")
    message_type: str = Field(default="text", description="Type of message: text, image, file, system")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "messages"
        indexes = [
            [("sender_id", 1), ("receiver_id", 1), ("created_at", -1)],  # For last message between two users
        ]

    def __repr__(self):
        return f"<Message(id={self.id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"
