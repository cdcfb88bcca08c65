from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.database.mysql import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    status_message = Column(String(500), nullable=True)
    is_online = Column(Boolean, default=False)
    last_seen_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def name(self) -> str:
        """화면에 표시되는 이름 (display_name이 없으면 username)"""
        return self.display_name or self.username or ""

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, username={self.username})>"
