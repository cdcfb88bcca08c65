"""
프로필 이미지 placeholder 처리

저장된 이미지가 없거나 기본 "U" placeholder인 경우, 표시명 첫 글자로
만든 placeholder URL로 대체합니다.
"""

from typing import Optional

from app.core.config import settings

PLACEHOLDER_HOST = "placehold.co"
GENERIC_PLACEHOLDER_TEXT = "text=U"
DEFAULT_INITIAL = "U"


def is_generic_placeholder(avatar_url: Optional[str]) -> bool:
    """알 수 없는 사용자용 기본 placeholder인지 확인"""
    if not avatar_url:
        return False
    return PLACEHOLDER_HOST in avatar_url and GENERIC_PLACEHOLDER_TEXT in avatar_url


def avatar_initial(display_name: Optional[str]) -> str:
    """표시명의 첫 글자(대문자), 이름이 비어 있으면 "U" """
    name = (display_name or "").strip()
    return name[0].upper() if name else DEFAULT_INITIAL


def placeholder_avatar(display_name: Optional[str],
                       template: Optional[str] = None) -> str:
    template = template or settings.placeholder_avatar_url
    return template.format(initial=avatar_initial(display_name))


def resolve_avatar(avatar_url: Optional[str],
                   display_name: Optional[str],
                   template: Optional[str] = None) -> str:
    """
    표시할 프로필 이미지 URL을 결정합니다.

    Args:
        avatar_url: 저장된 프로필 이미지 URL (없으면 None 또는 빈 문자열)
        display_name: 사용자 표시명
        template: "{initial}"을 포함한 placeholder URL 템플릿

    Returns:
        str: 저장된 이미지 URL 또는 개인화된 placeholder URL
    """
    if not avatar_url or is_generic_placeholder(avatar_url):
        return placeholder_avatar(display_name, template)
    return avatar_url
