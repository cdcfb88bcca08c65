from typing import Optional
from fastapi import WebSocket, status
from app.utils.auth import decode_access_token
import logging

logger = logging.getLogger(__name__)


async def authenticate_websocket(websocket: WebSocket, token: Optional[str]) -> Optional[int]:
    """
    WebSocket 연결에서 JWT 토큰을 검증하고 사용자 ID를 반환합니다.

    Args:
        websocket: WebSocket 연결 객체
        token: "Bearer <jwt>" 형식의 Authorization 값 또는 순수 토큰

    Returns:
        int: 인증된 사용자 ID, 인증 실패 시 None
    """
    try:
        if not token:
            logger.warning("No token provided for WebSocket connection")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return None

        # Bearer 접두사 제거
        actual_token = token[len("Bearer "):] if token.startswith("Bearer ") else token

        # JWT 토큰 디코드
        payload = decode_access_token(actual_token)
        if not payload:
            logger.warning("Invalid token provided for WebSocket connection")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return None

        user_id = payload.get("sub")
        if not user_id:
            logger.warning("Token missing user ID (sub) for WebSocket connection")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return None

        logger.info(f"WebSocket authentication successful for user: {user_id}")
        return int(user_id)

    except Exception as e:
        logger.error(f"WebSocket authentication error: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return None
