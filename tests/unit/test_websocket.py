import pytest
from datetime import timedelta
from unittest.mock import AsyncMock
from fastapi import status

from app.utils.auth import create_access_token
from app.websockets.auth import authenticate_websocket
from app.websockets.connection_manager import ConnectionManager


class TestConnectionManager:
    """채널별 WebSocket 연결 매니저 테스트"""

    def test_initial_state(self):
        manager = ConnectionManager()

        assert manager.channel_connections == {}
        assert manager.connection_info == {}
        assert manager.get_channel_count("user_1") == 0
        assert manager.is_channel_active("user_1") is False

    @pytest.mark.asyncio
    async def test_connect_accepts_and_subscribes(self):
        manager = ConnectionManager()
        websocket = AsyncMock()

        await manager.connect(websocket, "user_1")

        websocket.accept.assert_awaited_once()
        assert manager.get_channel(websocket) == "user_1"
        assert manager.get_active_channels() == ["user_1"]

    def test_multiple_sockets_per_channel(self):
        manager = ConnectionManager()
        first, second = AsyncMock(), AsyncMock()
        manager.subscribe(first, "user_1")
        manager.subscribe(second, "user_1")

        assert manager.get_channel_count("user_1") == 2

        manager.disconnect(first)
        assert manager.get_channel_count("user_1") == 1

        manager.disconnect(second)
        assert manager.get_active_channels() == []

    def test_disconnect_unknown_socket(self):
        manager = ConnectionManager()
        manager.disconnect(AsyncMock())
        assert manager.channel_connections == {}

    @pytest.mark.asyncio
    async def test_failed_socket_is_dropped(self):
        manager = ConnectionManager()
        healthy, broken = AsyncMock(), AsyncMock()
        broken.send_json.side_effect = RuntimeError("closed")
        manager.subscribe(healthy, "user_1")
        manager.subscribe(broken, "user_1")

        delivered = await manager.send_to_channel("user_1", {"event": "friendRemoved"})

        assert delivered == 1
        assert manager.get_channel(broken) is None
        assert manager.get_channel_count("user_1") == 1

    @pytest.mark.asyncio
    async def test_send_to_empty_channel(self):
        assert await ConnectionManager().send_to_channel("user_2", {}) == 0


class TestWebSocketAuth:
    """WebSocket 인증 테스트"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix", ["", "Bearer "])
    async def test_valid_token(self, prefix):
        websocket = AsyncMock()
        token = create_access_token({"sub": "7"})

        user_id = await authenticate_websocket(websocket, prefix + token)

        assert user_id == 7
        websocket.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_token_closes_with_policy_violation(self):
        websocket = AsyncMock()

        assert await authenticate_websocket(websocket, None) is None
        websocket.close.assert_awaited_once_with(code=status.WS_1008_POLICY_VIOLATION)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self):
        websocket = AsyncMock()
        token = create_access_token({"sub": "7"}, expires_delta=timedelta(seconds=-1))

        assert await authenticate_websocket(websocket, token) is None
        websocket.close.assert_awaited_once_with(code=status.WS_1008_POLICY_VIOLATION)


class TestNotificationsEndpoint:
    """/ws/notifications 엔드포인트 테스트"""

    def test_ping_pong(self):
        from fastapi.testclient import TestClient
        from app.main import app
        from app.websockets.connection_manager import manager

        token = create_access_token({"sub": "11"})

        # lifespan(DB 연결)을 실행하지 않도록 context manager 없이 사용
        client = TestClient(app)
        with client.websocket_connect(f"/ws/notifications?token={token}") as websocket:
            welcome = websocket.receive_json()
            assert welcome["type"] == "connection_established"
            assert welcome["channel"] == "user_11"
            assert manager.is_channel_active("user_11")

            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}
