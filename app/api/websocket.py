from typing import Optional
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query

from app.core.logging import get_logger, log_websocket_event
from app.services.notification_dispatcher import user_channel
from app.websockets.auth import authenticate_websocket
from app.websockets.connection_manager import manager

logger = get_logger(__name__)

router = APIRouter(prefix="/ws", tags=["WebSocket"])


@router.websocket("/notifications")
async def notifications_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
):
    """
    개인 알림 채널 WebSocket 연결 엔드포인트

    Authorization 헤더 또는 token 쿼리 파라미터로 인증하며,
    연결은 사용자 채널(user_{id})에 등록되어 관계 변경 이벤트를 수신합니다.

    Args:
        websocket: WebSocket 연결 객체
        token: JWT 액세스 토큰 (헤더가 없을 때 사용)
    """
    # 1. WebSocket 인증
    user_id = await authenticate_websocket(websocket, websocket.headers.get('Authorization') or token)
    if not user_id:
        return

    # 2. 사용자 채널에 연결 등록
    channel = user_channel(user_id)
    await manager.connect(websocket, channel)
    log_websocket_event(logger, "connected", user_id, channel)

    try:
        await websocket.send_json({
            "type": "connection_established",
            "channel": channel,
            "user_id": user_id
        })

        # 3. 수신 루프 (클라이언트는 ping만 전송)
        while True:
            data = await websocket.receive_json()
            if isinstance(data, dict) and data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({
                    "type": "error",
                    "error_code": "unsupported_message",
                    "message": "This channel only accepts ping messages."
                })

    except WebSocketDisconnect:
        log_websocket_event(logger, "disconnected", user_id, channel)

    except ValueError as e:
        # JSON 파싱 오류
        logger.warning(f"Invalid JSON from user {user_id}: {e}")

    finally:
        manager.disconnect(websocket)
