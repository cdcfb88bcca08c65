"""
Contact Context Domain Events

각 이벤트는 관계 상태 전이가 커밋된 뒤 수신자의 개인 채널로 발행됩니다.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict
from .base import DomainEvent


@dataclass
class NewFriendRequest(DomainEvent):
    """친구 요청 수신 이벤트 (대상자에게)"""
    event_name = "newFriendRequest"

    relationship_id: int
    requester: Dict[str, Any]
    timestamp: datetime


@dataclass
class FriendRequestAccepted(DomainEvent):
    """친구 요청 수락 이벤트 (원래 요청자에게, 수락자 프로필 포함)"""
    event_name = "friendRequestAccepted"

    relationship_id: int
    message: str
    new_friend: Dict[str, Any]
    timestamp: datetime


@dataclass
class NewFriendAdded(DomainEvent):
    """친구 추가 이벤트 (수락자에게, 요청자 프로필 포함)"""
    event_name = "newFriendAdded"

    relationship_id: int
    message: str
    new_friend: Dict[str, Any]
    timestamp: datetime


@dataclass
class FriendRequestDeclined(DomainEvent):
    """친구 요청 거절 이벤트"""
    event_name = "friendRequestDeclined"

    request_id: int
    timestamp: datetime


@dataclass
class FriendRequestCancelled(DomainEvent):
    """친구 요청 취소 이벤트"""
    event_name = "friendRequestCancelled"

    request_id: int
    timestamp: datetime


@dataclass
class FriendRemoved(DomainEvent):
    """친구 삭제 이벤트"""
    event_name = "friendRemoved"

    friend_id: int
    timestamp: datetime


@dataclass
class YouWereBlocked(DomainEvent):
    """차단 이벤트"""
    event_name = "youWereBlocked"

    by_user: int
    timestamp: datetime


@dataclass
class YouWereUnblocked(DomainEvent):
    """차단 해제 이벤트"""
    event_name = "youWereUnblocked"

    by_user: int
    timestamp: datetime
