from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from .user import UserProfile


class RelationshipResponse(BaseModel):
    """관계 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="관계 ID")
    requester_id: int = Field(..., description="요청자 (또는 마지막으로 차단한 사용자) ID")
    addressee_id: int = Field(..., description="대상 사용자 ID")
    status: str = Field(..., description="관계 상태: pending, accepted, blocked")
    created_at: Optional[datetime] = Field(None, description="생성일시")
    updated_at: Optional[datetime] = Field(None, description="수정일시")


class RequestAction(BaseModel):
    """친구 요청 응답 스키마"""
    action: str = Field(..., description="수행할 액션: accept, decline")


class ContactActionResponse(BaseModel):
    """관계 변경 작업 응답 스키마"""
    message: str = Field(..., description="결과 메시지")
    relationship: Optional[RelationshipResponse] = Field(None, description="생성/수정/삭제된 관계")


class RelationshipStatusResponse(BaseModel):
    """특정 사용자와의 관계 상태 스키마"""
    user_id: int = Field(..., description="상대 사용자 ID")
    status: str = Field(..., description="관계 상태: none, pending, accepted, blocked")
    relationship: Optional[RelationshipResponse] = Field(None, description="관계 정보")


class LastMessage(BaseModel):
    """마지막 메시지 스키마"""
    id: Optional[str] = Field(None, description="메시지 ID")
    sender_id: int = Field(..., description="보낸 사용자 ID")
    receiver_id: int = Field(..., description="받은 사용자 ID")
    content: str = Field(..., description="메시지 내용")
    message_type: str = Field(default="text", description="메시지 타입")
    created_at: datetime = Field(..., description="전송 시간")
    sender: Optional[UserProfile] = Field(None, description="보낸 사용자 프로필")


class FriendEntry(UserProfile):
    """친구 목록 항목 스키마 (프로필 + 안 읽은 수 + 마지막 메시지)"""
    type: str = Field(default="individual", description="채팅 타입")
    unread_count: int = Field(default=0, description="읽지 않은 메시지 수")
    last_message: Optional[LastMessage] = Field(None, description="마지막 메시지")
    messages: List[LastMessage] = Field(default_factory=list, description="미리 불러온 메시지 목록")


class FriendListResponse(BaseModel):
    """친구 목록 응답 스키마"""
    friends: List[FriendEntry] = Field(..., description="친구 목록")


class ContactRequestEntry(UserProfile):
    """친구 요청 목록 항목 스키마 (상대방 프로필 + 요청 ID)"""
    request_id: int = Field(..., description="친구 요청(관계) ID")
    requested_at: Optional[datetime] = Field(None, description="요청 생성일")


class ReceivedRequestsResponse(BaseModel):
    """받은 친구 요청 목록"""
    received_requests: List[ContactRequestEntry] = Field(..., description="받은 친구 요청")


class SentRequestsResponse(BaseModel):
    """보낸 친구 요청 목록"""
    sent_requests: List[ContactRequestEntry] = Field(..., description="보낸 친구 요청")


class BlockedUsersResponse(BaseModel):
    """차단한 사용자 목록"""
    blocked_users: List[UserProfile] = Field(..., description="차단한 사용자")


class SuggestedUsersResponse(BaseModel):
    """친구 추천 사용자 목록"""
    available_users: List[UserProfile] = Field(..., description="관계가 없는 사용자")
