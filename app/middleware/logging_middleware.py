"""
API 요청 로깅 미들웨어

모든 API 요청과 응답을 구조화된 형태로 로깅합니다.
"""

import time
import uuid
from typing import Callable, Dict, Iterable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, set_request_context, clear_request_context, log_api_call

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SENSITIVE_REQUEST_HEADERS = {"authorization", "cookie", "x-api-key"}
SENSITIVE_RESPONSE_HEADERS = {"set-cookie"}


def redact_headers(headers: Iterable, sensitive: set) -> Dict[str, str]:
    """민감한 헤더 값을 가린 사본"""
    return {
        name: "***REDACTED***" if name.lower() in sensitive else value
        for name, value in headers
    }


def get_client_ip(request: Request) -> str:
    """클라이언트 IP 주소 추출"""
    # X-Forwarded-For 헤더 확인 (프록시/로드밸런서 사용 시)
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client is not None:
        return request.client.host

    return "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """API 요청/응답 로깅 미들웨어"""

    def __init__(self, app, log_requests: bool = True, log_responses: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 요청 ID (게이트웨이가 전달한 값이 있으면 재사용)
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        start_time = time.time()

        set_request_context(request_id)

        if self.log_requests:
            self._log_request(request, request_id)

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_responses:
                self._log_response(request, response, request_id, duration_ms)

            # API 호출 요약 로깅
            log_api_call(
                logger,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                request_id=request_id,
                query_params=dict(request.query_params) if request.query_params else None,
                client_ip=get_client_ip(request)
            )

            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000

            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "event_type": "api_error",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "client_ip": get_client_ip(request)
                },
                exc_info=True
            )

            raise

        finally:
            clear_request_context()

    def _log_request(self, request: Request, request_id: str):
        """요청 정보 로깅"""
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "event_type": "request_started",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params) if request.query_params else None,
                "headers": redact_headers(request.headers.items(), SENSITIVE_REQUEST_HEADERS),
                "client_ip": get_client_ip(request),
                "user_agent": request.headers.get("user-agent")
            }
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        duration_ms: float
    ):
        """응답 정보 로깅"""
        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "event_type": "request_completed",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "response_headers": redact_headers(response.headers.items(), SENSITIVE_RESPONSE_HEADERS),
                "client_ip": get_client_ip(request)
            }
        )


class PerformanceLoggingMiddleware(BaseHTTPMiddleware):
    """성능 로깅 미들웨어 (느린 요청 감지)"""

    def __init__(self, app, slow_request_threshold_ms: float = 1000):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000

        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={
                    "event_type": "slow_request",
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "threshold_ms": self.slow_request_threshold_ms,
                    "client_ip": get_client_ip(request)
                }
            )

        return response
