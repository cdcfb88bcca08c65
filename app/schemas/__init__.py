# User schemas
from .user import (
    UserProfile,
    TokenData
)

# Relationship schemas
from .relationship import (
    RelationshipResponse,
    RequestAction,
    ContactActionResponse,
    RelationshipStatusResponse,
    LastMessage,
    FriendEntry,
    FriendListResponse,
    ContactRequestEntry,
    ReceivedRequestsResponse,
    SentRequestsResponse,
    BlockedUsersResponse,
    SuggestedUsersResponse
)
