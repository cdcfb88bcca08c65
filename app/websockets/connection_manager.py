from typing import Dict, Set, List, Optional
from fastapi import WebSocket
import logging

logger = logging.getLogger(__name__)


class ConnectionManager:
    """사용자별 알림 채널에 연결된 WebSocket을 관리합니다."""

    def __init__(self):
        # 채널별 연결: {channel: {websocket, ...}} (한 사용자가 여러 탭을 열 수 있음)
        self.channel_connections: Dict[str, Set[WebSocket]] = {}
        # WebSocket별 채널 정보: {websocket: channel}
        self.connection_info: Dict[WebSocket, str] = {}

    async def connect(self, websocket: WebSocket, channel: str):
        """새로운 WebSocket 연결을 수락하고 채널에 등록합니다."""
        await websocket.accept()
        self.subscribe(websocket, channel)

    def subscribe(self, websocket: WebSocket, channel: str):
        """이미 수락된 WebSocket을 채널에 등록합니다."""
        self.channel_connections.setdefault(channel, set()).add(websocket)
        self.connection_info[websocket] = channel
        logger.info(f"WebSocket subscribed to channel {channel}")

    def disconnect(self, websocket: WebSocket):
        """WebSocket 연결 정보를 제거합니다."""
        channel = self.connection_info.pop(websocket, None)
        if channel is None:
            return

        sockets = self.channel_connections.get(channel)
        if sockets is not None:
            sockets.discard(websocket)
            # 채널에 연결이 없으면 채널 자체를 제거
            if not sockets:
                del self.channel_connections[channel]

        logger.info(f"WebSocket unsubscribed from channel {channel}")

    async def send_to_channel(self, channel: str, data: dict) -> int:
        """
        채널에 연결된 모든 WebSocket에 JSON 데이터를 전송합니다.

        Returns:
            int: 전송에 성공한 연결 수
        """
        sockets = list(self.channel_connections.get(channel, ()))
        if not sockets:
            return 0

        delivered = 0
        disconnected = []

        for websocket in sockets:
            try:
                await websocket.send_json(data)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to send to channel {channel}: {e}")
                disconnected.append(websocket)

        # 연결이 끊어진 소켓 정리
        for websocket in disconnected:
            self.disconnect(websocket)

        return delivered

    def get_channel_count(self, channel: str) -> int:
        """채널에 연결된 WebSocket 수를 반환합니다."""
        return len(self.channel_connections.get(channel, ()))

    def is_channel_active(self, channel: str) -> bool:
        """채널에 연결된 WebSocket이 있는지 확인합니다."""
        return self.get_channel_count(channel) > 0

    def get_channel(self, websocket: WebSocket) -> Optional[str]:
        """WebSocket이 등록된 채널을 반환합니다."""
        return self.connection_info.get(websocket)

    def get_active_channels(self) -> List[str]:
        """현재 연결이 있는 모든 채널 목록을 반환합니다."""
        return list(self.channel_connections.keys())


# 전역 연결 매니저 인스턴스
manager = ConnectionManager()
