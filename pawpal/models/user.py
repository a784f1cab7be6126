# pawpal/models/user.py
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


def normalize_username(username: Optional[str]) -> str:
    """사용자 이름은 앞뒤 공백을 제거한 소문자로 저장/비교합니다."""
    return (username or '').strip().lower()


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID 는 uid 이며, 필드는 웹 클라이언트와 공유하는 camelCase 로 저장됩니다.
    """
    uid: str
    email: Optional[str]
    display_name: str
    username: str
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None
    lowercase_display_name: str = ''
    last_login: Optional[str] = None
    fcm_tokens: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        display_name = data.get('displayName') or ''
        return cls(
            uid=data.get('uid') or data.get('id'),
            email=data.get('email'),
            display_name=display_name,
            username=data.get('username') or '',
            photo_url=data.get('photoURL'),
            phone_number=data.get('phoneNumber'),
            lowercase_display_name=data.get('lowercaseDisplayName') or display_name.lower(),
            last_login=data.get('lastLogin'),
            fcm_tokens=data.get('fcmTokens') or []
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'uid': self.uid,
            'email': self.email,
            'displayName': self.display_name,
            'username': self.username,
            'photoURL': self.photo_url,
            'lowercaseDisplayName': self.lowercase_display_name,
        }
        if self.phone_number is not None:
            data['phoneNumber'] = self.phone_number
        if self.last_login is not None:
            data['lastLogin'] = self.last_login
        return data

    def public_summary(self, include_private: bool = False) -> Dict[str, Any]:
        """다른 사용자에게 보여줄 요약 정보. 전화번호는 공개 게이트를 통과한 경우에만 포함합니다."""
        summary = {
            'uid': self.uid,
            'display_name': self.display_name,
            'username': self.username,
            'photo_url': self.photo_url,
        }
        if include_private:
            summary['phone_number'] = self.phone_number
        return summary


@dataclass
class ProviderAccount:
    """외부 인증 제공자가 확인해 준 계정 정보."""
    external_id: str
    email: Optional[str]
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    email_verified: bool = False
    id_token: Optional[str] = None
