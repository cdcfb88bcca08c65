"""
WebSocket 실시간 알림 모듈

주요 구성 요소:
- connection_manager: 사용자 채널별 WebSocket 연결 관리
- auth: WebSocket 인증 처리
"""

from .connection_manager import manager, ConnectionManager
from .auth import authenticate_websocket

__all__ = [
    "manager",
    "ConnectionManager",
    "authenticate_websocket",
]
