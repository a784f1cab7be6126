# pawpal/models/post.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    user / avatar / pet_* 필드는 작성 시점의 스냅샷이며 이후 이름이 바뀌어도 갱신되지 않습니다.
    """
    id: str
    user_id: str
    user: str
    content: str
    avatar: Optional[str] = None
    pet_name: str = ''
    pet_type: str = ''
    pet_species: str = ''
    image: Optional[str] = None
    likes: int = 0
    comments: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            user=data.get('user', ''),
            content=data.get('content', ''),
            avatar=data.get('avatar'),
            pet_name=data.get('petName', ''),
            pet_type=data.get('petType', ''),
            pet_species=data.get('petSpecies', ''),
            image=data.get('image'),
            likes=int(data.get('likes') or 0),
            comments=int(data.get('comments') or 0),
            created_at=data.get('createdAt')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'user': self.user,
            'avatar': self.avatar,
            'petName': self.pet_name,
            'petType': self.pet_type,
            'petSpecies': self.pet_species,
            'content': self.content,
            'image': self.image,
            'likes': self.likes,
            'comments': self.comments,
            'createdAt': self.created_at,
        }


@dataclass
class Comment:
    """'posts/{id}/comments' 하위 컬렉션 문서."""
    id: str
    user_id: str
    user_name: str
    text: str
    user_avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            user_name=data.get('userName', ''),
            text=data.get('text', ''),
            user_avatar=data.get('userAvatar'),
            created_at=data.get('createdAt')
        )
