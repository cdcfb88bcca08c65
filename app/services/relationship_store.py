"""
Relationship store.

관계(relationships) 테이블에 대한 조회/생성/수정/삭제를 담당합니다.
순서 없는 사용자 쌍의 유일성은 DB 유니크 제약(uq_relationships_pair)으로 보장되며,
쌍 제약 위반은 DuplicateRelationshipError로, 그 외 무결성 오류(FK, CHECK)는
RelationshipStoreError로 변환됩니다.
"""

from typing import List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.logging import get_logger, log_database_operation
from app.models.relationships import Relationship, UNIQUE_PAIR_CONSTRAINT, pair_key

logger = get_logger(__name__)


class DuplicateRelationshipError(Exception):
    """같은 사용자 쌍에 대한 관계가 이미 존재함 (유니크 제약 위반)"""


class RelationshipStoreError(Exception):
    """저장소 장애"""


def is_pair_violation(error: IntegrityError) -> bool:
    """IntegrityError가 사용자 쌍 유니크 제약 위반인지 확인"""
    message = str(error.orig)
    if UNIQUE_PAIR_CONSTRAINT in message:
        return True
    # SQLite는 제약 이름 대신 컬럼 목록을 보고함
    return "UNIQUE constraint failed" in message and "user_low_id" in message


class RelationshipStore:
    """관계 저장소"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # 조회
    # =========================================================================

    async def find_by_pair(self, user_a: int, user_b: int) -> Optional[Relationship]:
        """두 사용자 간의 관계를 찾습니다 (방향 무관)"""
        low, high = pair_key(user_a, user_b)
        query = select(Relationship).where(
            Relationship.user_low_id == low,
            Relationship.user_high_id == high
        )
        return await self._scalar(query)

    async def find_by_id(self, relationship_id: int) -> Optional[Relationship]:
        """관계를 ID로 조회합니다."""
        query = select(Relationship).where(Relationship.id == relationship_id)
        return await self._scalar(query)

    async def list_for_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        role: str = "any"
    ) -> List[Relationship]:
        """
        사용자가 포함된 관계 목록을 조회합니다 (ID 순).

        Args:
            user_id: 사용자 ID
            status: 관계 상태 필터 (None이면 전체)
            role: "requester", "addressee" 또는 "any"
        """
        if role == "requester":
            condition = Relationship.requester_id == user_id
        elif role == "addressee":
            condition = Relationship.addressee_id == user_id
        else:
            condition = or_(
                Relationship.requester_id == user_id,
                Relationship.addressee_id == user_id
            )

        query = select(Relationship).where(condition)
        if status is not None:
            query = query.where(Relationship.status == status)
        query = query.order_by(Relationship.id)

        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list relationships for user {user_id}: {e}")
            raise RelationshipStoreError(str(e)) from e

    async def related_user_ids(self, user_id: int) -> Set[int]:
        """상태와 무관하게 관계가 있는 모든 상대방 ID"""
        related = set()
        for relationship in await self.list_for_user(user_id):
            related.update((relationship.requester_id, relationship.addressee_id))
        related.discard(user_id)
        return related

    # =========================================================================
    # 변경 (각각 하나의 트랜잭션)
    # =========================================================================

    async def create(self, requester_id: int, addressee_id: int, status: str) -> Relationship:
        """새 관계를 생성합니다."""
        relationship = Relationship(
            requester_id=requester_id,
            addressee_id=addressee_id,
            status=status
        )
        self.db.add(relationship)
        await self._commit("INSERT", requester_id=requester_id, addressee_id=addressee_id)
        await self.db.refresh(relationship)
        return relationship

    async def update(self, relationship: Relationship, **changes) -> Relationship:
        """관계를 제자리에서 수정합니다."""
        for field, value in changes.items():
            setattr(relationship, field, value)
        await self._commit("UPDATE", relationship_id=relationship.id)
        await self.db.refresh(relationship)
        return relationship

    async def delete(self, relationship: Relationship) -> None:
        """관계를 삭제합니다 (soft delete 없음)."""
        await self.db.delete(relationship)
        await self._commit("DELETE", relationship_id=relationship.id)

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    async def _scalar(self, query) -> Optional[Relationship]:
        try:
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Relationship lookup failed: {e}")
            raise RelationshipStoreError(str(e)) from e

    async def _commit(self, operation: str, **extra) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_pair_violation(e):
                logger.warning(f"Relationship {operation} rejected by unique pair constraint: {e.orig}")
                raise DuplicateRelationshipError(str(e.orig)) from e
            logger.error(f"Relationship {operation} violated an integrity constraint: {e.orig}")
            raise RelationshipStoreError(str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Relationship {operation} failed: {e}")
            raise RelationshipStoreError(str(e)) from e

        log_database_operation(logger, operation, Relationship.__tablename__, affected_rows=1, **extra)
