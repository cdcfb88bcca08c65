"""
Relationship state machine.

사용자 쌍의 관계 상태 전이를 검증하고 실행합니다.

    absent -> pending -> accepted | absent
    accepted -> absent
    absent | pending | accepted -> blocked
    blocked -> absent

모든 검증은 저장소 변경 전에 수행되며, 각 작업은 정확히 하나의 저장소 변경
(생성/수정/삭제)만 수행합니다. 알림은 변경이 커밋된 뒤에 발행됩니다.
"""

from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import (
    InvalidOperationException,
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ConflictException,
    InternalFailureException
)
from app.core.logging import get_logger, log_relationship_transition
from app.models.relationships import Relationship, RelationshipStatus
from app.models.users import User
from app.services import user_service
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.relationship_store import (
    RelationshipStore,
    DuplicateRelationshipError,
    RelationshipStoreError
)

logger = get_logger(__name__)

ACCEPT = "accept"
DECLINE = "decline"


@dataclass
class BlockResult:
    """차단 결과 (created=True이면 새 관계 생성)"""
    relationship: Relationship
    created: bool


class RelationshipService:
    """관계 상태 머신 (관계 상태의 유일한 writer)"""

    def __init__(self, db: AsyncSession, dispatcher: NotificationDispatcher):
        self.db = db
        self.store = RelationshipStore(db)
        self.dispatcher = dispatcher

    async def request_connection(self, actor: User, target_id: int) -> Relationship:
        """
        친구 요청을 전송합니다.

        Args:
            actor: 요청하는 사용자
            target_id: 대상 사용자 ID

        Returns:
            Relationship: 생성된 pending 관계

        Raises:
            InvalidOperationException: 자기 자신에게 요청
            ResourceNotFoundException: 대상 사용자 없음. 잘못된 입력(400)이 아니라
                존재하지 않는 리소스(404)로 보고합니다.
            ConflictException: 이미 친구이거나 관계가 존재
        """
        actor_id = actor.id
        if actor_id == target_id:
            raise InvalidOperationException("You cannot send a friend request to yourself")

        await self._require_user(target_id, "The user you are trying to add does not exist")

        existing = await self._call(self.store.find_by_pair(actor_id, target_id))
        if existing:
            if existing.status == RelationshipStatus.ACCEPTED:
                raise ConflictException("You are already friends with this user")
            raise ConflictException("A friend request already exists")

        relationship = await self._call(
            self.store.create(actor_id, target_id, RelationshipStatus.PENDING),
            conflict_message="A friend request already exists"
        )
        log_relationship_transition(
            logger, "request", actor_id, target_id, relationship.id, relationship.status
        )

        await self.dispatcher.friend_request_sent(relationship, actor)
        return relationship

    async def respond_to_request(self, actor: User, request_id: int, action: str) -> Relationship:
        """
        받은 친구 요청을 수락하거나 거절합니다.

        수락 시 관계가 accepted로 변경되고, 거절 시 관계가 삭제됩니다.
        반환되는 관계는 거절의 경우 삭제된 행입니다.
        """
        if action not in (ACCEPT, DECLINE):
            raise InvalidOperationException("Invalid action. Must be 'accept' or 'decline'.")

        actor_id = actor.id
        request = await self._call(self.store.find_by_id(request_id))
        if not request:
            raise ResourceNotFoundException("Friend request", "Friend request not found.")
        if request.addressee_id != actor_id:
            raise AuthorizationException("You are not authorized to respond to this request.")
        if request.status != RelationshipStatus.PENDING:
            raise ConflictException("This request has already been responded to.")

        requester_id = request.requester_id

        if action == ACCEPT:
            # 알림용 요청자 프로필은 상태 변경 전에 로드
            requester = await self._find_user(requester_id)
            relationship = await self._call(
                self.store.update(request, status=RelationshipStatus.ACCEPTED)
            )
            log_relationship_transition(
                logger, "accept", actor_id, requester_id, relationship.id, relationship.status
            )

            if requester is None:
                logger.warning(f"Requester {requester_id} no longer exists; skipping accept notifications")
            else:
                await self.dispatcher.friend_request_accepted(relationship, actor, requester)
            return relationship

        await self._call(self.store.delete(request))
        log_relationship_transition(logger, "decline", actor_id, requester_id, request_id)

        await self.dispatcher.friend_request_declined(request_id, requester_id)
        return request

    async def cancel_request(self, actor: User, request_id: int) -> Relationship:
        """자신이 보낸 pending 친구 요청을 취소합니다."""
        actor_id = actor.id
        request = await self._call(self.store.find_by_id(request_id))

        # 존재하지 않음과 권한 없음을 구분하지 않음
        if (
            request is None
            or request.requester_id != actor_id
            or request.status != RelationshipStatus.PENDING
        ):
            raise ResourceNotFoundException(
                "Friend request",
                "Request not found or you are not authorized to cancel it."
            )

        addressee_id = request.addressee_id
        await self._call(self.store.delete(request))
        log_relationship_transition(logger, "cancel", actor_id, addressee_id, request_id)

        await self.dispatcher.friend_request_cancelled(request_id, addressee_id)
        return request

    async def remove_connection(self, actor: User, other_id: int) -> Relationship:
        """친구 관계를 삭제합니다."""
        actor_id = actor.id
        friendship = await self._call(self.store.find_by_pair(actor_id, other_id))
        if friendship is None or friendship.status != RelationshipStatus.ACCEPTED:
            raise ResourceNotFoundException("Friendship", "You are not friends with this user.")

        relationship_id = friendship.id
        await self._call(self.store.delete(friendship))
        log_relationship_transition(logger, "remove", actor_id, other_id, relationship_id)

        await self.dispatcher.friend_removed(actor_id, other_id)
        return friendship

    async def block_user(self, actor: User, target_id: int) -> BlockResult:
        """
        사용자를 차단합니다.

        기존 관계가 있으면 (상태 무관) 제자리에서 requester=actor, addressee=target,
        status=blocked로 덮어씁니다. 없으면 새 blocked 관계를 생성합니다.
        차단 알림(youWereBlocked)은 새 관계를 생성한 경우에만 발행됩니다.
        """
        actor_id = actor.id
        if actor_id == target_id:
            raise InvalidOperationException("You cannot block yourself.")

        await self._require_user(target_id, "The user you are trying to block does not exist.")

        existing = await self._call(self.store.find_by_pair(actor_id, target_id))
        if existing is not None:
            previous_status = existing.status
            relationship = await self._call(
                self.store.update(
                    existing,
                    requester_id=actor_id,
                    addressee_id=target_id,
                    status=RelationshipStatus.BLOCKED
                )
            )
            log_relationship_transition(
                logger, "block", actor_id, target_id, relationship.id, relationship.status,
                previous_status=previous_status
            )
            return BlockResult(relationship=relationship, created=False)

        relationship = await self._call(
            self.store.create(actor_id, target_id, RelationshipStatus.BLOCKED),
            conflict_message="A relationship with this user was modified concurrently"
        )
        log_relationship_transition(
            logger, "block", actor_id, target_id, relationship.id, relationship.status
        )

        await self.dispatcher.user_blocked(actor_id, target_id)
        return BlockResult(relationship=relationship, created=True)

    async def unblock_user(self, actor: User, target_id: int) -> Relationship:
        """자신이 차단한 사용자의 차단을 해제합니다 (관계 삭제)."""
        actor_id = actor.id
        blocked = await self._call(self.store.find_by_pair(actor_id, target_id))
        if (
            blocked is None
            or blocked.status != RelationshipStatus.BLOCKED
            or blocked.requester_id != actor_id
        ):
            raise AuthenticationException("Blocked relationship not found.")

        relationship_id = blocked.id
        await self._call(self.store.delete(blocked))
        log_relationship_transition(logger, "unblock", actor_id, target_id, relationship_id)

        await self.dispatcher.user_unblocked(actor_id, target_id)
        return blocked

    async def get_relationship_with(self, actor: User, other_id: int) -> Optional[Relationship]:
        """두 사용자 간의 현재 관계 (없으면 None)"""
        return await self._call(self.store.find_by_pair(actor.id, other_id))

    # =========================================================================
    # 내부 헬퍼
    # =========================================================================

    async def _find_user(self, user_id: int) -> Optional[User]:
        try:
            return await user_service.find_user_by_id(self.db, user_id)
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed for user {user_id}: {e}")
            raise InternalFailureException()

    async def _require_user(self, user_id: int, message: str) -> User:
        user = await self._find_user(user_id)
        if not user:
            raise ResourceNotFoundException("User", message, details={"user_id": user_id})
        return user

    async def _call(self, operation, conflict_message: str = "Relationship already exists"):
        """저장소 예외를 도메인 예외로 변환"""
        try:
            return await operation
        except DuplicateRelationshipError:
            raise ConflictException(conflict_message)
        except RelationshipStoreError:
            raise InternalFailureException()
