"""
Contact Service Configuration

환경 변수를 통한 설정 관리
"""

from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()  # .env 파일 로드


class Settings(BaseSettings):
    """Contact Service 설정"""

    # Application
    app_name: str = "Contact Service"
    version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8004

    # Database - MySQL
    mysql_url: str

    # Database - MongoDB (direct messages)
    mongo_url: str = "mongodb://localhost:27017"
    mongo_database: str = "chat_db"

    # Database - Redis (unread counters)
    redis_url: str = "redis://localhost:6379"
    redis_max_connections: int = 20

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_hours: int = 2

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Notifications: "websocket" | "kafka"
    notification_backend: str = "websocket"
    channel_prefix: str = "user_"

    # Friends list
    friends_fanout_concurrency: int = 10
    placeholder_avatar_url: str = "https://placehold.co/50x50/695cfe/ffffff?text={initial}"

    # Logging
    log_dir: str = "logs"
    slow_request_threshold_ms: float = 1000

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
