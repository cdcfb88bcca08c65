"""
Contacts API

친구 요청/수락/거절/취소, 친구 삭제, 차단/차단 해제 및 친구 목록 조회 엔드포인트
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_current_user,
    get_relationship_service,
    get_friends_aggregator
)
from app.core.logging import get_logger
from app.models.relationships import Relationship
from app.models.users import User
from app.schemas.relationship import (
    RelationshipResponse,
    RequestAction,
    ContactActionResponse,
    RelationshipStatusResponse,
    FriendListResponse,
    ReceivedRequestsResponse,
    SentRequestsResponse,
    BlockedUsersResponse,
    SuggestedUsersResponse
)
from app.services.friends_aggregator import FriendsAggregator
from app.services.relationship_service import RelationshipService, ACCEPT

logger = get_logger(__name__)

router = APIRouter(prefix="/contacts", tags=["Contacts"])


def _action_response(message: str, relationship: Optional[Relationship]) -> ContactActionResponse:
    return ContactActionResponse(
        message=message,
        relationship=RelationshipResponse.model_validate(relationship) if relationship else None
    )


# =============================================================================
# 관계 변경
# =============================================================================

@router.post("/requests/{user_id}", response_model=ContactActionResponse,
             status_code=status.HTTP_201_CREATED)
async def send_friend_request(
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """
    친구 요청을 전송합니다.

    Args:
        user_id: 친구 요청을 받을 사용자 ID
        current_user: 현재 인증된 사용자
        service: 관계 상태 머신

    Returns:
        ContactActionResponse: 생성된 pending 관계
    """
    relationship = await service.request_connection(current_user, user_id)
    return _action_response("Friend request sent successfully.", relationship)


@router.post("/requests/{request_id}/respond", response_model=ContactActionResponse)
async def respond_to_friend_request(
        request_id: int,
        body: RequestAction,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """
    받은 친구 요청을 수락(accept)하거나 거절(decline)합니다.
    """
    relationship = await service.respond_to_request(current_user, request_id, body.action)

    if body.action == ACCEPT:
        return _action_response("Friend request accepted.", relationship)
    return _action_response("Friend request declined.", relationship)


@router.post("/requests/{request_id}/cancel", response_model=ContactActionResponse)
async def cancel_friend_request(
        request_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """보낸 친구 요청을 취소합니다."""
    relationship = await service.cancel_request(current_user, request_id)
    return _action_response("Friend request cancelled.", relationship)


@router.post("/friends/{user_id}/remove", response_model=ContactActionResponse)
async def remove_friend(
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """친구를 삭제합니다."""
    relationship = await service.remove_connection(current_user, user_id)
    return _action_response("Friend removed successfully.", relationship)


@router.post("/block/{user_id}", response_model=ContactActionResponse,
             responses={201: {"model": ContactActionResponse}})
async def block_user(
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """
    사용자를 차단합니다.

    새 관계가 생성되면 201, 기존 관계를 차단 상태로 덮어쓰면 200을 반환합니다.
    """
    result = await service.block_user(current_user, user_id)
    response = _action_response("User blocked successfully.", result.relationship)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        content=response.model_dump(mode="json")
    )


@router.post("/unblock/{user_id}", response_model=ContactActionResponse)
async def unblock_user(
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """차단을 해제합니다."""
    relationship = await service.unblock_user(current_user, user_id)
    return _action_response("User unblocked successfully.", relationship)


@router.get("/status/{user_id}", response_model=RelationshipStatusResponse)
async def get_relationship_status(
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: RelationshipService = Depends(get_relationship_service)
):
    """특정 사용자와의 현재 관계 상태를 조회합니다."""
    relationship = await service.get_relationship_with(current_user, user_id)
    if relationship is None:
        return RelationshipStatusResponse(user_id=user_id, status="none")

    return RelationshipStatusResponse(
        user_id=user_id,
        status=relationship.status,
        relationship=RelationshipResponse.model_validate(relationship)
    )


# =============================================================================
# 목록 조회
# =============================================================================

@router.get("/friends", response_model=FriendListResponse)
async def get_friends(
        current_user: User = Depends(get_current_user),
        aggregator: FriendsAggregator = Depends(get_friends_aggregator)
):
    """
    친구 목록을 조회합니다.

    각 항목은 프로필, 읽지 않은 메시지 수, 마지막 메시지를 포함합니다.
    """
    friends = await aggregator.get_friends(current_user.id)
    return FriendListResponse(friends=friends)


@router.get("/requests/received", response_model=ReceivedRequestsResponse)
async def get_received_requests(
        current_user: User = Depends(get_current_user),
        aggregator: FriendsAggregator = Depends(get_friends_aggregator)
):
    """받은 친구 요청 목록"""
    requests = await aggregator.get_received_requests(current_user.id)
    return ReceivedRequestsResponse(received_requests=requests)


@router.get("/requests/sent", response_model=SentRequestsResponse)
async def get_sent_requests(
        current_user: User = Depends(get_current_user),
        aggregator: FriendsAggregator = Depends(get_friends_aggregator)
):
    """보낸 친구 요청 목록"""
    requests = await aggregator.get_sent_requests(current_user.id)
    return SentRequestsResponse(sent_requests=requests)


@router.get("/blocked", response_model=BlockedUsersResponse)
async def get_blocked_users(
        current_user: User = Depends(get_current_user),
        aggregator: FriendsAggregator = Depends(get_friends_aggregator)
):
    """차단한 사용자 목록"""
    users = await aggregator.get_blocked_users(current_user.id)
    return BlockedUsersResponse(blocked_users=users)


@router.get("/suggestions", response_model=SuggestedUsersResponse)
async def get_suggested_users(
        limit: Optional[int] = Query(None, ge=1, description="최대 조회 수 (없으면 전체)"),
        current_user: User = Depends(get_current_user),
        aggregator: FriendsAggregator = Depends(get_friends_aggregator)
):
    """관계가 없는 사용자 목록 (친구 추천)"""
    users = await aggregator.get_suggested_users(current_user.id, limit=limit)
    return SuggestedUsersResponse(available_users=users)
