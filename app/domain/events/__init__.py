"""
Domain Events

모든 Domain Event의 기본 클래스 및 이벤트 정의
"""

from .base import DomainEvent
from .contact_events import (
    NewFriendRequest,
    FriendRequestAccepted,
    NewFriendAdded,
    FriendRequestDeclined,
    FriendRequestCancelled,
    FriendRemoved,
    YouWereBlocked,
    YouWereUnblocked
)

__all__ = [
    'DomainEvent',
    'NewFriendRequest',
    'FriendRequestAccepted',
    'NewFriendAdded',
    'FriendRequestDeclined',
    'FriendRequestCancelled',
    'FriendRemoved',
    'YouWereBlocked',
    'YouWereUnblocked',
]
