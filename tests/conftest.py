import os

# Settings는 import 시점에 생성되므로 app import 전에 테스트 환경 변수를 설정
os.environ.setdefault("MYSQL_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("NOTIFICATION_BACKEND", "websocket")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Dict, List, Optional, Set, Tuple
from datetime import datetime
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.dependencies import get_notifier, get_unread_counter, get_last_message_lookup
from app.database.mysql import Base, get_async_session
from app.domain.events import DomainEvent
from app.models.users import User
from app.models.relationships import Relationship, RelationshipStatus
from app.schemas.relationship import LastMessage
from app.services.notification_dispatcher import NotificationDispatcher
from app.utils.auth import create_access_token


# 테스트용 인메모리 SQLite 데이터베이스 설정
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# 협력 객체 Fake
# =============================================================================

class RecordingNotifier:
    """발행된 (channel, event)를 기록하는 notifier"""

    def __init__(self, fail: bool = False):
        self.published: List[Tuple[str, DomainEvent]] = []
        self.fail = fail

    async def publish(self, channel: str, event: DomainEvent) -> None:
        if self.fail:
            raise ConnectionError("transport unavailable")
        self.published.append((channel, event))

    @property
    def event_names(self) -> List[str]:
        return [event.event_name for _, event in self.published]

    def events_for(self, channel: str) -> List[DomainEvent]:
        return [event for published_channel, event in self.published if published_channel == channel]

    def clear(self):
        self.published.clear()


class FakeUnreadCounter:
    """메모리 기반 읽지 않은 메시지 카운터"""

    def __init__(self, counts: Optional[Dict[int, Dict[int, int]]] = None, fail: bool = False):
        self.counts = counts or {}
        self.fail = fail
        self.calls: List[Tuple[int, List[int]]] = []

    async def get_counts(self, owner_id: int, peer_ids) -> Dict[int, int]:
        peer_ids = list(peer_ids)
        self.calls.append((owner_id, peer_ids))
        if self.fail:
            raise ConnectionError("redis unavailable")
        owner_counts = self.counts.get(owner_id, {})
        return {peer_id: owner_counts[peer_id] for peer_id in peer_ids if peer_id in owner_counts}


class FakeLastMessageLookup:
    """메모리 기반 마지막 메시지 조회 (failing에 포함된 상대는 예외 발생)"""

    def __init__(self, failing: Optional[Set[int]] = None):
        self.messages: Dict[frozenset, LastMessage] = {}
        self.failing = failing or set()

    def add(self, sender_id: int, receiver_id: int, content: str) -> LastMessage:
        message = LastMessage(
            id=f"msg-{len(self.messages) + 1}",
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            created_at=datetime.utcnow()
        )
        self.messages[frozenset((sender_id, receiver_id))] = message
        return message

    async def get_last_message(self, owner_id: int, peer_id: int) -> Optional[LastMessage]:
        if peer_id in self.failing:
            raise TimeoutError(f"message store timeout for {peer_id}")
        return self.messages.get(frozenset((owner_id, peer_id)))


# =============================================================================
# 데이터베이스 / 클라이언트
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """테스트용 비동기 데이터베이스 엔진 생성"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """테스트용 데이터베이스 세션"""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier) -> NotificationDispatcher:
    return NotificationDispatcher(notifier)


@pytest.fixture
def unread_counter() -> FakeUnreadCounter:
    return FakeUnreadCounter()


@pytest.fixture
def last_messages() -> FakeLastMessageLookup:
    return FakeLastMessageLookup()


@pytest_asyncio.fixture
async def client(test_session, notifier, unread_counter, last_messages) -> AsyncGenerator[AsyncClient, None]:
    """테스트용 비동기 HTTP 클라이언트"""
    def get_test_session():
        return test_session

    app.dependency_overrides[get_async_session] = get_test_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_unread_counter] = lambda: unread_counter
    app.dependency_overrides[get_last_message_lookup] = lambda: last_messages

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# 사용자 / 관계
# =============================================================================

async def create_user(session: AsyncSession, username: str, **fields) -> User:
    user = User(username=username, email=f"{username}@example.com", **fields)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user_1(test_session) -> User:
    """테스트용 사용자 1"""
    return await create_user(test_session, "alice", display_name="Alice")


@pytest_asyncio.fixture
async def test_user_2(test_session) -> User:
    """테스트용 사용자 2"""
    return await create_user(test_session, "bob", display_name="bob")


@pytest_asyncio.fixture
async def test_user_3(test_session) -> User:
    """테스트용 사용자 3 (프로필 이미지 보유)"""
    return await create_user(
        test_session, "carol", profile_image_url="https://cdn.example.com/carol.png"
    )


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_user_1(test_user_1) -> Dict[str, str]:
    return auth_headers(test_user_1)


@pytest.fixture
def headers_user_2(test_user_2) -> Dict[str, str]:
    return auth_headers(test_user_2)


@pytest.fixture
def headers_user_3(test_user_3) -> Dict[str, str]:
    return auth_headers(test_user_3)


async def create_relationship(
    session: AsyncSession,
    requester: User,
    addressee: User,
    status: str
) -> Relationship:
    relationship = Relationship(
        requester_id=requester.id,
        addressee_id=addressee.id,
        status=status
    )
    session.add(relationship)
    await session.commit()
    await session.refresh(relationship)
    return relationship


@pytest.fixture
def make_user(test_session):
    """사용자 생성 팩토리"""
    async def _make(username: str, **fields) -> User:
        return await create_user(test_session, username, **fields)
    return _make


@pytest.fixture
def make_relationship(test_session):
    """관계 행 직접 생성 팩토리 (상태 머신 우회)"""
    async def _make(requester: User, addressee: User, status: str) -> Relationship:
        return await create_relationship(test_session, requester, addressee, status)
    return _make


@pytest.fixture
def make_headers():
    """인증 헤더 팩토리"""
    return auth_headers


@pytest_asyncio.fixture
async def pending_request(test_session, test_user_1, test_user_2) -> Relationship:
    """1 -> 2 대기 중인 친구 요청"""
    return await create_relationship(test_session, test_user_1, test_user_2, RelationshipStatus.PENDING)


@pytest_asyncio.fixture
async def accepted_friendship(test_session, test_user_1, test_user_2) -> Relationship:
    """1 <-> 2 친구 관계"""
    return await create_relationship(test_session, test_user_1, test_user_2, RelationshipStatus.ACCEPTED)
