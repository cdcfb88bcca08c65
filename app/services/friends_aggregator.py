"""
Friends aggregator.

친구 목록 조회용 읽기 전용 조합 서비스입니다. accepted 관계에서 친구를 찾고,
읽지 않은 메시지 수(일괄 조회)와 친구별 마지막 메시지(동시 조회)를 합쳐
하나의 응답으로 만듭니다. 친구 한 명의 조회 실패는 해당 항목에만 영향을 줍니다.
"""

import asyncio
import time
from typing import Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.errors import InternalFailureException
from app.core.logging import get_logger, log_performance_metric
from app.models.relationships import Relationship, RelationshipStatus, other_party
from app.models.users import User
from app.schemas.relationship import FriendEntry, LastMessage, ContactRequestEntry
from app.schemas.user import UserProfile
from app.services import user_service
from app.services.message_lookup import LastMessageLookup
from app.services.relationship_store import RelationshipStore, RelationshipStoreError
from app.services.unread_counter import UnreadCounter
from app.utils.avatar import resolve_avatar

logger = get_logger(__name__)


def to_profile(user: User) -> UserProfile:
    profile = UserProfile.model_validate(user)
    profile.profile_image_url = resolve_avatar(user.profile_image_url, user.name)
    return profile


def with_sender(message: Optional[LastMessage], profiles: Dict[int, UserProfile]) -> Optional[LastMessage]:
    if message is None:
        return None
    return message.model_copy(update={"sender": profiles.get(message.sender_id)})


class FriendsAggregator:
    """친구 목록 및 보조 목록 조회"""

    def __init__(
        self,
        db: AsyncSession,
        unread_counter: UnreadCounter,
        last_messages: LastMessageLookup,
        max_concurrency: Optional[int] = None
    ):
        self.db = db
        self.store = RelationshipStore(db)
        self.unread_counter = unread_counter
        self.last_messages = last_messages
        self.max_concurrency = max(1, max_concurrency or settings.friends_fanout_concurrency)

    async def get_friends(self, user_id: int) -> List[FriendEntry]:
        """
        친구 목록을 조회합니다.

        Args:
            user_id: 조회하는 사용자 ID

        Returns:
            List[FriendEntry]: 관계가 로드된 순서의 친구 목록

        Raises:
            InternalFailureException: 관계 로드 실패
        """
        start_time = time.time()

        # 1-2. accepted 관계 로드 후 상대방 확인 (삭제된 사용자는 제외)
        friends, owner = await self._load_friends(user_id)
        friend_ids = [friend.id for friend in friends]

        # 3-4. 읽지 않은 수 일괄 조회 + 친구별 마지막 메시지 동시 조회
        unread_counts, last_messages = await asyncio.gather(
            self._load_unread_counts(user_id, friend_ids),
            self._load_last_messages(user_id, friend_ids)
        )

        # 5. 병합 (마지막 메시지에는 보낸 사람 프로필을 붙임)
        profiles = {friend.id: to_profile(friend) for friend in friends}
        if owner is not None:
            profiles[user_id] = to_profile(owner)

        entries = []
        for friend in friends:
            last_message = with_sender(last_messages.get(friend.id), profiles)
            entries.append(FriendEntry(
                **profiles[friend.id].model_dump(),
                unread_count=unread_counts.get(friend.id, 0),
                last_message=last_message,
                messages=[last_message] if last_message else []
            ))

        log_performance_metric(
            logger,
            "friends_list_aggregation",
            (time.time() - start_time) * 1000,
            user_id=user_id,
            friend_count=len(entries)
        )
        return entries

    async def get_received_requests(self, user_id: int) -> List[ContactRequestEntry]:
        """받은 pending 요청 (요청자 프로필 포함)"""
        rows = await self._list(user_id, RelationshipStatus.PENDING, "addressee")
        return await self._request_entries(rows, [row.requester_id for row in rows])

    async def get_sent_requests(self, user_id: int) -> List[ContactRequestEntry]:
        """보낸 pending 요청 (대상자 프로필 포함)"""
        rows = await self._list(user_id, RelationshipStatus.PENDING, "requester")
        return await self._request_entries(rows, [row.addressee_id for row in rows])

    async def get_blocked_users(self, user_id: int) -> List[UserProfile]:
        """내가 차단한 사용자 목록"""
        rows = await self._list(user_id, RelationshipStatus.BLOCKED, "requester")
        users = await self._users(row.addressee_id for row in rows)
        return [to_profile(users[row.addressee_id]) for row in rows if row.addressee_id in users]

    async def get_suggested_users(self, user_id: int, limit: Optional[int] = None) -> List[UserProfile]:
        """상태와 무관하게 나와 관계가 없는 사용자 목록"""
        try:
            excluded = await self.store.related_user_ids(user_id)
            excluded.add(user_id)
            users = await user_service.find_users_excluding(self.db, excluded, limit=limit)
        except (RelationshipStoreError, SQLAlchemyError) as e:
            logger.error(f"Failed to load suggested users for user {user_id}: {e}")
            raise InternalFailureException("Failed to fetch suggested users.")
        return [to_profile(user) for user in users]

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    async def _load_friends(self, user_id: int) -> Tuple[List[User], Optional[User]]:
        """친구 목록과 조회하는 사용자 본인을 한 번의 사용자 조회로 로드"""
        try:
            rows = await self.store.list_for_user(user_id, RelationshipStatus.ACCEPTED)
            other_ids = [other_party(row, user_id) for row in rows]
            users = await user_service.find_users_by_ids(self.db, other_ids + [user_id])
        except (RelationshipStoreError, SQLAlchemyError) as e:
            logger.error(f"Failed to load friends for user {user_id}: {e}")
            raise InternalFailureException("Failed to fetch friends list.")

        missing = [other_id for other_id in other_ids if other_id not in users]
        if missing:
            logger.warning(f"Dropping friends with missing user records for user {user_id}: {missing}")

        friends = [users[other_id] for other_id in other_ids if other_id in users]
        return friends, users.get(user_id)

    async def _load_unread_counts(self, user_id: int, friend_ids: List[int]) -> Dict[int, int]:
        if not friend_ids:
            return {}
        try:
            return await self.unread_counter.get_counts(user_id, friend_ids)
        except Exception as e:
            logger.error(f"Failed to fetch unread counts for user {user_id}: {e}")
            return {}

    async def _load_last_messages(
        self,
        user_id: int,
        friend_ids: List[int]
    ) -> Dict[int, Optional[LastMessage]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(friend_id: int) -> Tuple[int, Optional[LastMessage]]:
            async with semaphore:
                try:
                    return friend_id, await self.last_messages.get_last_message(user_id, friend_id)
                except Exception as e:
                    logger.error(f"Error fetching last message for friend {friend_id}: {e}")
                    return friend_id, None

        results = await asyncio.gather(*(fetch(friend_id) for friend_id in friend_ids))
        return dict(results)

    async def _list(self, user_id: int, status: str, role: str) -> List[Relationship]:
        try:
            return await self.store.list_for_user(user_id, status, role)
        except RelationshipStoreError:
            raise InternalFailureException()

    async def _users(self, user_ids) -> Dict[int, User]:
        try:
            return await user_service.find_users_by_ids(self.db, user_ids)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load users: {e}")
            raise InternalFailureException()

    async def _request_entries(
        self,
        rows: List[Relationship],
        counterpart_ids: List[int]
    ) -> List[ContactRequestEntry]:
        users = await self._users(counterpart_ids)
        entries = []
        for row, counterpart_id in zip(rows, counterpart_ids):
            user = users.get(counterpart_id)
            if user is None:
                continue
            entries.append(ContactRequestEntry(
                **to_profile(user).model_dump(),
                request_id=row.id,
                requested_at=row.created_at
            ))
        return entries
