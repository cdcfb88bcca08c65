"""
Notification dispatcher.

관계 상태 전이를 사용자별 실시간 채널 이벤트로 변환하여 발행합니다.
발행은 fire-and-forget이며, 전달 실패는 로그만 남기고 호출자에게 전파되지 않습니다.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol

from app.core.config import settings
from app.core.logging import get_logger, log_notification_event
from app.domain.events import (
    DomainEvent,
    NewFriendRequest,
    FriendRequestAccepted,
    NewFriendAdded,
    FriendRequestDeclined,
    FriendRequestCancelled,
    FriendRemoved,
    YouWereBlocked,
    YouWereUnblocked
)
from app.infrastructure.kafka import DomainEventProducer, kafka_config
from app.models.relationships import Relationship
from app.models.users import User
from app.schemas.relationship import FriendEntry
from app.schemas.user import UserProfile
from app.utils.avatar import resolve_avatar
from app.websockets.connection_manager import ConnectionManager

logger = get_logger(__name__)


def user_channel(user_id: int) -> str:
    """사용자 ID -> 개인 알림 채널명 (예: user_42)"""
    return f"{settings.channel_prefix}{user_id}"


def channel_message(event: DomainEvent) -> Dict[str, Any]:
    """채널로 전달되는 메시지 형식: {"event": name, "data": payload}"""
    data = event.to_dict()
    data.pop('__event_type__', None)
    return {"event": event.event_name, "data": data}


class Notifier(Protocol):
    """채널에 이벤트를 전달하는 실시간 전송 계층"""

    async def publish(self, channel: str, event: DomainEvent) -> None:
        ...


class WebSocketNotifier:
    """로컬 WebSocket 연결로 직접 전달"""

    def __init__(self, connection_manager: ConnectionManager):
        self.connection_manager = connection_manager

    async def publish(self, channel: str, event: DomainEvent) -> None:
        delivered = await self.connection_manager.send_to_channel(channel, channel_message(event))
        if not delivered:
            logger.debug(f"No active subscribers on channel {channel} for {event.event_name}")


class KafkaNotifier:
    """Kafka notification 토픽으로 발행 (채널명을 파티션 키로 사용)"""

    def __init__(self, producer: DomainEventProducer, topic: Optional[str] = None):
        self.producer = producer
        self.topic = topic or kafka_config.topic_notification_events

    async def publish(self, channel: str, event: DomainEvent) -> None:
        message = channel_message(event)
        message["channel"] = channel
        await self.producer.publish(self.topic, message, key=channel)


def public_profile(user: User) -> Dict[str, Any]:
    """알림 payload용 공개 프로필"""
    profile = UserProfile.model_validate(user)
    profile.profile_image_url = resolve_avatar(user.profile_image_url, user.name)
    return profile.model_dump(mode="json")


def new_friend_payload(user: User) -> Dict[str, Any]:
    """새 친구 항목 payload (친구 목록 항목과 같은 형태, 메시지 없음)"""
    entry = FriendEntry(**public_profile(user))
    return entry.model_dump(mode="json")


class NotificationDispatcher:
    """관계 상태 전이 -> 수신자별 채널 이벤트"""

    def __init__(
        self,
        notifier: Notifier,
        channel_for: Callable[[int], str] = user_channel
    ):
        self.notifier = notifier
        self.channel_for = channel_for

    async def dispatch(self, recipient_id: int, event: DomainEvent) -> bool:
        """
        이벤트를 수신자 채널로 발행합니다.

        Returns:
            bool: 전달 성공 여부 (실패해도 예외를 전파하지 않음)
        """
        channel = self.channel_for(recipient_id)
        try:
            await self.notifier.publish(channel, event)
        except Exception as e:
            log_notification_event(
                logger, event.event_name, channel, delivered=False,
                recipient_id=recipient_id, error=str(e)
            )
            return False

        log_notification_event(logger, event.event_name, channel, recipient_id=recipient_id)
        return True

    # =========================================================================
    # 전이별 알림
    # =========================================================================

    async def friend_request_sent(self, relationship: Relationship, requester: User):
        await self.dispatch(
            relationship.addressee_id,
            NewFriendRequest(
                relationship_id=relationship.id,
                requester=public_profile(requester),
                timestamp=datetime.utcnow()
            )
        )

    async def friend_request_accepted(
        self,
        relationship: Relationship,
        acceptor: User,
        requester: User
    ):
        """수락은 양쪽 모두에게 알림 (각자 상대방을 새 친구로 받음)"""
        now = datetime.utcnow()
        await asyncio.gather(
            self.dispatch(
                requester.id,
                FriendRequestAccepted(
                    relationship_id=relationship.id,
                    message=f"You are now friends with {acceptor.name}",
                    new_friend=new_friend_payload(acceptor),
                    timestamp=now
                )
            ),
            self.dispatch(
                acceptor.id,
                NewFriendAdded(
                    relationship_id=relationship.id,
                    message=f"You are now friends with {requester.name}",
                    new_friend=new_friend_payload(requester),
                    timestamp=now
                )
            )
        )

    async def friend_request_declined(self, request_id: int, requester_id: int):
        await self.dispatch(
            requester_id,
            FriendRequestDeclined(request_id=request_id, timestamp=datetime.utcnow())
        )

    async def friend_request_cancelled(self, request_id: int, addressee_id: int):
        await self.dispatch(
            addressee_id,
            FriendRequestCancelled(request_id=request_id, timestamp=datetime.utcnow())
        )

    async def friend_removed(self, remover_id: int, friend_id: int):
        await self.dispatch(
            friend_id,
            FriendRemoved(friend_id=remover_id, timestamp=datetime.utcnow())
        )

    async def user_blocked(self, blocker_id: int, blocked_id: int):
        await self.dispatch(
            blocked_id,
            YouWereBlocked(by_user=blocker_id, timestamp=datetime.utcnow())
        )

    async def user_unblocked(self, unblocker_id: int, unblocked_id: int):
        await self.dispatch(
            unblocked_id,
            YouWereUnblocked(by_user=unblocker_id, timestamp=datetime.utcnow())
        )
