"""
API Dependencies

FastAPI dependency functions for authentication and service wiring
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import invalid_token_error, user_not_found_error
from app.database.mysql import get_async_session
from app.infrastructure.kafka import get_event_producer
from app.models.users import User
from app.services.friends_aggregator import FriendsAggregator
from app.services.message_lookup import LastMessageLookup, MongoLastMessageLookup
from app.services.notification_dispatcher import (
    Notifier,
    NotificationDispatcher,
    WebSocketNotifier,
    KafkaNotifier
)
from app.services.relationship_service import RelationshipService
from app.services.unread_counter import UnreadCounter, RedisUnreadCounter
from app.services.user_service import find_user_by_id
from app.utils.auth import decode_access_token
from app.websockets.connection_manager import manager

# OAuth2 설정 (토큰 발급은 User Service 담당)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """
    현재 인증된 사용자를 조회합니다.

    Args:
        token: JWT 액세스 토큰
        db: 데이터베이스 세션

    Returns:
        User: 인증된 사용자 객체

    Raises:
        AuthenticationException: 토큰이 유효하지 않은 경우
        ResourceNotFoundException: 사용자가 존재하지 않는 경우
    """
    payload = decode_access_token(token)
    if not payload:
        raise invalid_token_error()

    user_id = payload.get("sub")
    if not user_id:
        raise invalid_token_error()

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise invalid_token_error()

    user = await find_user_by_id(db, user_id)
    if not user:
        raise user_not_found_error(user_id)

    return user


def get_notifier() -> Notifier:
    """설정된 알림 전송 계층 (websocket | kafka)"""
    if settings.notification_backend == "kafka":
        return KafkaNotifier(get_event_producer())
    return WebSocketNotifier(manager)


def get_notification_dispatcher(
    notifier: Notifier = Depends(get_notifier)
) -> NotificationDispatcher:
    return NotificationDispatcher(notifier)


def get_relationship_service(
    db: AsyncSession = Depends(get_async_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
) -> RelationshipService:
    return RelationshipService(db, dispatcher)


def get_unread_counter() -> UnreadCounter:
    return RedisUnreadCounter()


def get_last_message_lookup() -> LastMessageLookup:
    return MongoLastMessageLookup()


def get_friends_aggregator(
    db: AsyncSession = Depends(get_async_session),
    unread_counter: UnreadCounter = Depends(get_unread_counter),
    last_messages: LastMessageLookup = Depends(get_last_message_lookup)
) -> FriendsAggregator:
    return FriendsAggregator(db, unread_counter, last_messages)
