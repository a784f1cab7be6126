# pawpal/models/follow.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class EdgeStatus(Enum):
    """'follows' 문서에 저장되는 상태값."""
    PENDING = "pending"
    ACCEPTED = "accepted"


class FollowStatus(Enum):
    """
    조회 시 계산되는 팔로우 상태 (저장되지 않음).
    IS_SELF 는 A == B 인 경우의 단락(short-circuit) 상태입니다.
    """
    IS_SELF = "is_self"
    NOT_FOLLOWING = "not_following"
    PENDING = "pending"
    FOLLOWING = "following"


class FollowAction(Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


@dataclass
class FollowEdge:
    """Firestore 'follows' 컬렉션 문서 (follower -> following 방향 간선)."""
    id: str
    follower_id: str
    following_id: str
    status: EdgeStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FollowEdge":
        return cls(
            id=data.get('id'),
            follower_id=data.get('followerId'),
            following_id=data.get('followingId'),
            status=EdgeStatus(data.get('status', EdgeStatus.PENDING.value)),
            created_at=data.get('createdAt')
        )
