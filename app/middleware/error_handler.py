import traceback
from typing import Callable
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import IntegrityError, OperationalError, DatabaseError
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.errors import BaseCustomException, ErrorResponse, create_error_response
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def _json(error_response: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=error_response.status_code,
        content=error_response.model_dump()
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    통합 에러 처리 미들웨어

    라우터에서 처리되지 않은 예외를 캐치하고 표준화된 에러 응답을 반환합니다.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response

        except BaseCustomException as e:
            # 우리가 정의한 커스텀 예외들
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_dict()
            )

        except IntegrityError as e:
            # 데이터베이스 무결성 제약 조건 위반 (순서 없는 쌍 유니크 제약 등)
            error_detail = str(e.orig) if hasattr(e, 'orig') else str(e)
            logger.warning(f"Integrity error: {error_detail}")

            return _json(create_error_response(
                "resource_conflict",
                "Relationship already exists",
                status.HTTP_409_CONFLICT,
                {"constraint": "unique"}
            ))

        except (OperationalError, DatabaseError) as e:
            # MySQL 데이터베이스 연결/작업 에러
            error_detail = str(e.orig) if hasattr(e, 'orig') else str(e)
            logger.error(f"Database error: {type(e).__name__}: {error_detail}")

            return _json(create_error_response(
                "database_error",
                "Database connection or operation failed",
                status.HTTP_503_SERVICE_UNAVAILABLE,
                {"detail": error_detail if settings.debug else None}
            ))

        except (ConnectionFailure, ServerSelectionTimeoutError, RedisConnectionError) as e:
            # MongoDB / Redis 연결 에러
            logger.error(f"Storage connection error: {type(e).__name__}: {str(e)}")

            return _json(create_error_response(
                "storage_connection_error",
                "Storage backend connection failed",
                status.HTTP_503_SERVICE_UNAVAILABLE,
                {"detail": str(e) if settings.debug else None}
            ))

        except ValueError as e:
            # 값 에러 (타입 변환 실패 등)
            return _json(create_error_response(
                "value_error",
                str(e),
                status.HTTP_400_BAD_REQUEST
            ))

        except Exception as e:
            # 예상하지 못한 모든 에러들
            error_detail = None
            if settings.debug:
                error_detail = {
                    "exception": str(e),
                    "type": type(e).__name__,
                    "traceback": traceback.format_exc()
                }

            logger.error(f"Unhandled exception: {type(e).__name__}: {str(e)}", exc_info=True)

            return _json(create_error_response(
                "internal_server_error",
                "An unexpected error occurred",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_detail
            ))


def create_http_exception_handler():
    """FastAPI HTTPException 핸들러 생성"""
    async def http_exception_handler(request: Request, exc):
        """HTTPException을 표준 형식으로 변환"""

        # 우리의 커스텀 예외인 경우 그대로 반환
        if isinstance(exc, BaseCustomException):
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_dict(),
                headers=getattr(exc, "headers", None)
            )

        # 일반 HTTPException인 경우 표준 형식으로 변환
        error_response = create_error_response(
            "http_error",
            exc.detail if isinstance(exc.detail, str) else "HTTP error occurred",
            exc.status_code,
            {"detail": exc.detail} if not isinstance(exc.detail, str) else None
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(),
            headers=getattr(exc, "headers", None)
        )

    return http_exception_handler
