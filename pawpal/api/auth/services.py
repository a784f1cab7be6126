# pawpal/api/auth/services.py
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from pawpal.core.errors import InvalidCredential, MissingFieldError, PawPalError, UsernameTaken
from pawpal.models.user import ProviderAccount, User, normalize_username
from pawpal.services.document_store import DocumentStore
from pawpal.services.identity_provider import FirebaseIdentityProvider
from pawpal.utils.datetime_utils import DateTimeUtils

USERS = 'users'
REVOKED_TOKENS = 'revoked_tokens'


class AuthService:
    """
    인증/세션 관련 비즈니스 로직.

    외부 인증 제공자가 확인해 준 계정을 내부 users 문서와 연결하고,
    사용자 이름 중복 사전 검사(조회 후 쓰기, 트랜잭션 아님)를 수행합니다.
    """
    def __init__(self, store: DocumentStore, identity: FirebaseIdentityProvider):
        self.store = store
        self.identity = identity

    # --- 조회 ---
    def get_user(self, uid: str) -> Optional[User]:
        doc = self.store.get(USERS, uid)
        return User.from_dict(doc) if doc else None

    def find_by_username(self, username: str) -> Optional[User]:
        normalized = normalize_username(username)
        if not normalized:
            return None
        docs = self.store.query(USERS, filters=[('username', '==', normalized)], limit=1)
        return User.from_dict(docs[0]) if docs else None

    def is_username_taken(self, username: str, exclude_uid: Optional[str] = None) -> bool:
        """
        사용자 이름 사용 여부. 대소문자/앞뒤 공백을 무시합니다.
        exclude_uid 를 주면 본인이 이미 쓰고 있는 이름은 중복으로 보지 않습니다.
        """
        existing = self.find_by_username(username)
        return existing is not None and existing.uid != exclude_uid

    def is_email_verified(self, uid: str) -> bool:
        account = self.identity.get_account(uid)
        return bool(account and account.email_verified)

    # --- 가입/로그인 ---
    def register_with_credentials(self, email: str, password: str, display_name: str,
                                  username: str) -> Tuple[User, ProviderAccount]:
        """
        이메일/비밀번호로 가입합니다.
        사용자 이름 사전 검사 -> 계정 생성 -> users 문서 저장 -> 인증 메일 발송 순서로 진행합니다.
        """
        for field_name, value in (('email', email), ('password', password),
                                  ('display_name', display_name), ('username', username)):
            if not value or not str(value).strip():
                raise MissingFieldError(field_name)

        normalized = normalize_username(username)
        if self.is_username_taken(normalized):
            raise UsernameTaken()

        account = self.identity.create_account(email.strip(), password, display_name.strip())
        user = User(
            uid=account.external_id,
            email=account.email or email.strip(),
            display_name=display_name.strip(),
            username=normalized,
            photo_url=account.photo_url,
            lowercase_display_name=display_name.strip().lower(),
            last_login=DateTimeUtils.to_iso_string(DateTimeUtils.now())
        )
        self.store.set(USERS, user.uid, user.to_dict(), merge=True)
        logging.info(f"신규 사용자 가입 완료 (uid: {user.uid}, username: {normalized})")

        if account.id_token:
            try:
                self.identity.send_verification_email(account.id_token)
            except PawPalError as e:
                logging.warning(f"인증 메일 발송 실패 (uid: {user.uid}): {e}")
        return user, account

    def login_with_identifier(self, identifier: str, password: str) -> Tuple[User, ProviderAccount]:
        """
        이메일 또는 사용자 이름으로 로그인합니다.
        '@' 가 없으면 사용자 이름으로 이메일을 찾고, 찾지 못하면 입력값을 그대로 이메일로 사용합니다.
        """
        identifier = (identifier or '').strip()
        if not identifier:
            raise MissingFieldError('identifier')
        if not password:
            raise MissingFieldError('password')

        email = identifier
        if '@' not in identifier:
            user = self.find_by_username(identifier)
            if user is not None:
                if not user.email:
                    raise InvalidCredential()
                email = user.email

        account = self.identity.sign_in_with_password(email, password)
        user, _ = self.sync_user(account)
        return user, account

    def login_with_provider(self, kind: str, id_token: str) -> Tuple[User, ProviderAccount, bool]:
        account = self.identity.sign_in_with_provider(kind, id_token)
        user, is_new_user = self.sync_user(account)
        return user, account, is_new_user

    def sync_user(self, account: ProviderAccount) -> Tuple[User, bool]:
        """
        제공자 계정으로 users 문서를 병합(upsert)합니다.

        기존 displayName / username / photoURL 은 유지하고, 비어 있는 값만 제공자 정보로 채웁니다.
        lastLogin 과 lowercaseDisplayName 은 로그인할 때마다 갱신합니다.
        """
        existing_doc = self.store.get(USERS, account.external_id)
        existing = User.from_dict(existing_doc) if existing_doc else None
        is_new_user = existing is None

        email_prefix = (account.email or '').split('@')[0]
        display_name = (existing.display_name if existing else '') or account.display_name or email_prefix
        username = existing.username if existing else ''
        if not username:
            username = self._derive_username(account, email_prefix)
        photo_url = (existing.photo_url if existing else None) or account.photo_url

        user = User(
            uid=account.external_id,
            email=account.email or (existing.email if existing else None),
            display_name=display_name,
            username=username,
            photo_url=photo_url,
            phone_number=existing.phone_number if existing else None,
            lowercase_display_name=display_name.lower(),
            last_login=DateTimeUtils.to_iso_string(DateTimeUtils.now()),
            fcm_tokens=existing.fcm_tokens if existing else []
        )
        self.store.set(USERS, user.uid, user.to_dict(), merge=True)
        if is_new_user:
            logging.info(f"제공자 계정으로 신규 사용자 생성 (uid: {user.uid})")
        return user, is_new_user

    def _derive_username(self, account: ProviderAccount, email_prefix: str) -> str:
        candidate = normalize_username(email_prefix)
        if candidate and not self.is_username_taken(candidate, exclude_uid=account.external_id):
            return candidate
        return account.external_id[:8].lower()

    def resend_verification(self, id_token: Optional[str]) -> bool:
        """인증 메일을 다시 보냅니다. 세션(ID 토큰)이 없으면 조용히 False 를 반환합니다."""
        if not id_token:
            return False
        self.identity.send_verification_email(id_token)
        return True

    # --- Blocklist 관련 로직 ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        """전달받은 토큰의 jti를 만료 시간과 함께 Firestore에 저장합니다."""
        self.store.set(REVOKED_TOKENS, jti, {
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires
        })

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        """jti를 이용해 해당 토큰이 무효화 목록에 있는지 확인합니다."""
        return self.store.get(REVOKED_TOKENS, jwt_payload['jti']) is not None

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Access 토큰과 Refresh 토큰을 모두 Blocklist에 추가합니다."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"사용자 로그아웃 처리 완료. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
