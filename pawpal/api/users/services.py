# pawpal/api/users/services.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from pawpal.api.auth.services import USERS, AuthService
from pawpal.api.follows.services import FollowService
from pawpal.core.errors import MissingFieldError, UsernameTaken
from pawpal.models.user import User, normalize_username
from pawpal.services.document_store import DOCUMENT_ID, DocumentStore
from pawpal.services.identity_provider import FirebaseIdentityProvider
from pawpal.services.storage_service import StorageService


class UserService:
    """
    사용자 프로필 조회/수정, 사용자 목록 및 검색을 담당합니다.
    다른 사용자에게 보여주는 전화번호는 팔로우 공개 범위를 통과한 경우에만 포함합니다.
    """
    def __init__(self, store: DocumentStore, auth_service: AuthService, follow_service: FollowService,
                 storage_service: StorageService, identity: FirebaseIdentityProvider):
        self.store = store
        self.auth_service = auth_service
        self.follow_service = follow_service
        self.storage_service = storage_service
        self.identity = identity

    def _summary_for(self, user: User, viewer_id: Optional[str]) -> Dict[str, Any]:
        summary = user.public_summary(include_private=self.follow_service.can_see_private(viewer_id, user.uid))
        if viewer_id:
            summary['follow_status'] = self.follow_service.get_status(viewer_id, user.uid).value
        return summary

    def get_profile(self, user_id: str, viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
        user = self.auth_service.get_user(user_id)
        return self._summary_for(user, viewer_id) if user else None

    def get_profile_by_username(self, username: str, viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
        user = self.auth_service.find_by_username(username)
        return self._summary_for(user, viewer_id) if user else None

    def list_users(self, viewer_id: str, limit: int = 20, cursor: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """문서 ID 순으로 사용자 목록을 페이지 단위로 조회합니다. 다음 페이지 커서는 마지막 문서 ID 입니다."""
        docs = self.store.query(USERS, order_by=DOCUMENT_ID, limit=limit, start_after=cursor)
        users = [self._summary_for(User.from_dict(doc), viewer_id) for doc in docs]
        next_cursor = docs[-1]['id'] if len(docs) == limit else None
        return users, next_cursor

    def search_by_email(self, email: str, viewer_id: str) -> List[Dict[str, Any]]:
        """이메일 정확 일치 검색. 검색한 본인은 결과에서 제외합니다."""
        normalized = (email or '').strip().lower()
        if not normalized:
            return []
        docs = self.store.query(USERS, filters=[('email', '==', normalized)], limit=10)
        return [self._summary_for(User.from_dict(doc), viewer_id) for doc in docs if doc['id'] != viewer_id]

    def update_profile(self, uid: str, display_name: Optional[str] = None, username: Optional[str] = None,
                       phone_number: Optional[str] = None) -> Optional[User]:
        """
        프로필을 부분 수정합니다. 사용자 이름은 본인을 제외하고 중복 검사합니다.
        사용자가 없으면 None.
        """
        user = self.auth_service.get_user(uid)
        if not user:
            return None

        updates: Dict[str, Any] = {}
        if display_name is not None:
            display_name = display_name.strip()
            if not display_name:
                raise MissingFieldError('display_name')
            updates['displayName'] = display_name
            updates['lowercaseDisplayName'] = display_name.lower()
        if username is not None:
            normalized = normalize_username(username)
            if not normalized:
                raise MissingFieldError('username')
            if self.auth_service.is_username_taken(normalized, exclude_uid=uid):
                raise UsernameTaken()
            updates['username'] = normalized
        if phone_number is not None:
            updates['phoneNumber'] = phone_number.strip()

        if not updates:
            return user

        self.store.update(USERS, uid, updates)
        if 'displayName' in updates:
            self.identity.update_display_name(uid, updates['displayName'])
        logging.info(f"사용자 프로필 수정 완료 (uid: {uid}, fields: {list(updates)})")
        return self.auth_service.get_user(uid)

    def update_profile_image(self, uid: str, file_path: str) -> Optional[User]:
        """업로드된 이미지를 공개로 전환하고 photoURL 로 설정합니다."""
        if not self.auth_service.get_user(uid):
            return None
        image_url = self.storage_service.make_public_and_get_url(file_path)
        self.store.update(USERS, uid, {'photoURL': image_url})
        return self.auth_service.get_user(uid)
