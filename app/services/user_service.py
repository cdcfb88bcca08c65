"""
User lookup service layer.

사용자 정보는 외부(User Service) 소유이며, 여기서는 ID 기반 조회만 수행합니다.
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.users import User


async def find_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    """사용자 ID로 조회"""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_users_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, User]:
    """여러 사용자를 한 번에 조회 ({user_id: User})"""
    ids = set(user_ids)
    if not ids:
        return {}

    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def find_users_excluding(
    db: AsyncSession,
    excluded_ids: Iterable[int],
    limit: Optional[int] = None
) -> List[User]:
    """제외 목록에 없는 사용자 조회 (ID 순)"""
    query = select(User).where(User.id.not_in(set(excluded_ids))).order_by(User.id)
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
