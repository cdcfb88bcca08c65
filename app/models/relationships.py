from datetime import datetime
from typing import Tuple
from sqlalchemy import (
    Column, Integer, DateTime, String, ForeignKey,
    UniqueConstraint, CheckConstraint, event
)
from app.database.mysql import Base


UNIQUE_PAIR_CONSTRAINT = "uq_relationships_pair"


class RelationshipStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"


class Relationship(Base):
    __tablename__ = "relationships"
    __table_args__ = (
        # 순서 없는 사용자 쌍당 하나의 관계만 허용
        UniqueConstraint("user_low_id", "user_high_id", name=UNIQUE_PAIR_CONSTRAINT),
        CheckConstraint("requester_id <> addressee_id", name="ck_relationships_distinct_users"),
    )

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)  # Requester or most recent blocker
    addressee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RelationshipStatus.PENDING)  # pending, accepted, blocked
    user_low_id = Column(Integer, nullable=False)
    user_high_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def involves(self, user_id: int) -> bool:
        return user_id in (self.requester_id, self.addressee_id)

    def __repr__(self):
        return (
            f"<Relationship(id={self.id}, requester_id={self.requester_id}, "
            f"addressee_id={self.addressee_id}, status={self.status})>"
        )


def pair_key(user_a: int, user_b: int) -> Tuple[int, int]:
    """두 사용자 ID를 순서 없는 쌍 키 (low, high)로 변환"""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


def other_party(relationship: Relationship, user_id: int) -> int:
    """관계에서 user_id의 상대방 ID를 반환"""
    if relationship.requester_id == user_id:
        return relationship.addressee_id
    return relationship.requester_id


@event.listens_for(Relationship, "before_insert")
@event.listens_for(Relationship, "before_update")
def _sync_pair_key(mapper, connection, target: Relationship):
    target.user_low_id, target.user_high_id = pair_key(target.requester_id, target.addressee_id)
