"""
Domain Event Base Class
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import ClassVar, Dict
import json


@dataclass
class DomainEvent:
    """Domain Event 기본 클래스"""
    timestamp: datetime

    # 실시간 채널로 전달되는 이벤트 이름
    event_name: ClassVar[str] = ""

    def to_dict(self) -> Dict:
        """Event를 dict로 변환"""
        data = asdict(self)
        # datetime을 ISO 형식 문자열로 변환
        data['timestamp'] = self.timestamp.isoformat()
        # Event 타입 추가 (Consumer에서 라우팅용)
        data['__event_type__'] = self.event_name or self.__class__.__name__
        return data

    def to_json(self) -> str:
        """Event를 JSON으로 변환"""
        return json.dumps(self.to_dict(), default=str)
