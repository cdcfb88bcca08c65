"""
읽지 않은 메시지 카운터 조회 (Redis)

카운터는 메시지 서비스가 관리하며, 소유자별 hash 하나에 상대방 ID를 필드로 저장합니다.
    unread:{owner_id}:individual -> {peer_id: count}
"""

from typing import Dict, Iterable, Protocol

from app.core.logging import get_logger
from app.database.redis import get_redis

logger = get_logger(__name__)

# Redis 키 패턴
UNREAD_COUNTS_KEY = "unread:{owner_id}:{chat_type}"


class UnreadCounter(Protocol):
    """(owner, peer) 별 읽지 않은 메시지 수 조회"""

    async def get_counts(self, owner_id: int, peer_ids: Iterable[int]) -> Dict[int, int]:
        ...


class RedisUnreadCounter:
    """Redis hash 기반 읽지 않은 메시지 카운터"""

    def __init__(self, chat_type: str = "individual"):
        self.chat_type = chat_type

    def key_for(self, owner_id: int) -> str:
        return UNREAD_COUNTS_KEY.format(owner_id=owner_id, chat_type=self.chat_type)

    async def get_counts(self, owner_id: int, peer_ids: Iterable[int]) -> Dict[int, int]:
        """
        여러 상대방의 읽지 않은 메시지 수를 한 번에 조회합니다.

        Returns:
            Dict[int, int]: 저장된 카운터가 있는 상대방만 포함
        """
        peer_ids = list(peer_ids)
        if not peer_ids:
            return {}

        redis = await get_redis()
        values = await redis.hmget(self.key_for(owner_id), [str(peer_id) for peer_id in peer_ids])

        counts = {}
        for peer_id, value in zip(peer_ids, values):
            if value is None:
                continue
            try:
                counts[peer_id] = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid unread counter for owner {owner_id}, peer {peer_id}: {value!r}")
        return counts
