# pawpal/models/notification.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional


class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    FOLLOW_REQUEST = "follow_request"


@dataclass
class Notification:
    """
    Firestore 'notifications' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    생성 이후에는 read 플래그만 변경됩니다.
    """
    id: str
    user_id: str              # 알림을 받는 사용자 ID
    title: str
    message: str
    type: NotificationType
    read: bool = False
    timestamp: Optional[datetime] = None
    related_id: Optional[str] = None      # follow_request 의 경우 follows 문서 ID
    from_user_id: Optional[str] = None
    from_user_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        try:
            n_type = NotificationType(data.get('type', 'info'))
        except ValueError:
            n_type = NotificationType.INFO
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            title=data.get('title', ''),
            message=data.get('message', ''),
            type=n_type,
            read=bool(data.get('read', False)),
            timestamp=data.get('timestamp'),
            related_id=data.get('relatedId'),
            from_user_id=data.get('fromUserId'),
            from_user_name=data.get('fromUserName')
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'userId': self.user_id,
            'title': self.title,
            'message': self.message,
            'type': self.type.value,
            'read': self.read,
            'timestamp': self.timestamp,
        }
        if self.related_id is not None:
            data['relatedId'] = self.related_id
        if self.from_user_id is not None:
            data['fromUserId'] = self.from_user_id
            data['fromUserName'] = self.from_user_name
        return data
