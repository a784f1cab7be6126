# pawpal/models/chat.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any


def session_key(user_a: str, user_b: str) -> List[str]:
    """1:1 대화방 키. 참여자 순서와 무관하도록 정렬된 쌍을 사용합니다."""
    return sorted([user_a, user_b])


@dataclass
class ChatSession:
    """Firestore 'chats' 컬렉션 문서. 목록 렌더링용 미리보기 필드를 비정규화해 보관합니다."""
    id: str
    participants: List[str]
    last_message: str = ''
    last_timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None
    other_user: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatSession":
        return cls(
            id=data.get('id'),
            participants=list(data.get('participants') or []),
            last_message=data.get('lastMessage') or '',
            last_timestamp=data.get('lastTimestamp'),
            created_at=data.get('createdAt')
        )

    def other_participant(self, user_id: str) -> Optional[str]:
        others = [p for p in self.participants if p != user_id]
        return others[0] if others else None


@dataclass
class ChatMessage:
    """'chats/{id}/messages' 하위 컬렉션 문서. timestamp 오름차순으로 정렬됩니다."""
    id: str
    sender_id: str
    text: str
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=data.get('id'),
            sender_id=data.get('senderId'),
            text=data.get('text', ''),
            timestamp=data.get('timestamp')
        )


@dataclass
class AssistantTurn:
    """AI 채팅 릴레이로 전달되는 대화 이력 한 턴."""
    role: str
    content: str

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "AssistantTurn":
        """
        {role, content} 또는 웹 클라이언트의 {role, parts: [{text}]} 형식을 모두 받습니다.
        'model' 역할은 'assistant' 로 변환합니다.
        """
        role = item.get('role', 'user')
        if role == 'model':
            role = 'assistant'
        content = item.get('content')
        if content is None:
            content = ''.join(part.get('text', '') for part in (item.get('parts') or []))
        return cls(role=role, content=content)

    def to_message(self) -> Dict[str, str]:
        return {'role': self.role, 'content': self.content}


@dataclass
class AIChatSession:
    """'users/{uid}/ai_chats' 하위 컬렉션 문서. AI 도우미와의 저장된 대화방입니다."""
    id: str
    title: str
    last_timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIChatSession":
        return cls(
            id=data.get('id'),
            title=data.get('title', ''),
            last_timestamp=data.get('lastTimestamp'),
            created_at=data.get('createdAt')
        )


@dataclass
class AIChatMessage:
    """AI 대화방의 메시지. role 은 'user' 또는 'model' 입니다."""
    id: str
    role: str
    text: str
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIChatMessage":
        return cls(
            id=data.get('id'),
            role=data.get('role', 'user'),
            text=data.get('text', ''),
            timestamp=data.get('timestamp')
        )

    def to_turn(self) -> AssistantTurn:
        return AssistantTurn.from_payload({'role': self.role, 'content': self.text})
