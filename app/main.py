"""
Contact Service - FastAPI Application

친구 요청/수락/차단 등 사용자 관계 관리와 친구 목록 조회를 담당하는 서비스
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

import app.api as api_package
from app.api import include_routers
from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.database import init_databases, close_databases
from app.infrastructure.kafka import get_event_producer
from app.middleware.error_handler import ErrorHandlerMiddleware, create_http_exception_handler
from app.middleware.logging_middleware import LoggingMiddleware, PerformanceLoggingMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    # Startup
    setup_logging()
    logger.info(f"{settings.app_name} starting up...")

    await init_databases()

    producer = None
    if settings.notification_backend == "kafka":
        producer = get_event_producer()
        await producer.start()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down...")

    if producer is not None:
        await producer.stop()

    await close_databases()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    lifespan=lifespan
)

# Middleware (마지막에 추가된 것이 가장 바깥)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(PerformanceLoggingMiddleware, slow_request_threshold_ms=settings.slow_request_threshold_ms)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())

# Include routers (contact, health, websocket)
include_routers(app, "api", api_package.__path__)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "version": settings.version,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
