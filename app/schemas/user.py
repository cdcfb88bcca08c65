from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class UserProfile(BaseModel):
    """사용자 공개 프로필 스키마 (민감한 정보 제외)"""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="사용자 ID")
    username: str = Field(..., description="사용자명")
    display_name: Optional[str] = Field(None, description="표시명")
    email: str = Field(..., description="이메일")
    status_message: Optional[str] = Field(None, description="상태 메시지")
    profile_image_url: Optional[str] = Field(None, description="프로필 이미지 URL")
    is_online: bool = Field(default=False, description="온라인 상태")
    last_seen_at: Optional[datetime] = Field(None, description="마지막 접속 시간")


class TokenData(BaseModel):
    """토큰 데이터 스키마"""
    user_id: Optional[int] = Field(None, description="사용자 ID")
    email: Optional[str] = Field(None, description="이메일")
