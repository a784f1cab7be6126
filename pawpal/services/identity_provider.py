# pawpal/services/identity_provider.py
"""
외부 인증 제공자(Firebase Authentication) 연동.

- 계정 생성 / 표시 이름 변경: firebase_admin.auth
- 이메일+비밀번호 로그인, 인증 메일 발송: Identity Toolkit REST API (requests)
- 소셜(Google/Apple) 로그인: 클라이언트가 받은 Firebase ID 토큰 검증

제공자 오류는 모두 이 모듈에서 도메인 예외로 변환됩니다.
"""
import logging
from typing import Any, Dict, Optional

import requests
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions
from flask import Flask

from pawpal.core.errors import (
    AccountNotFound,
    EmailInUse,
    InvalidCredential,
    NetworkTimeout,
    ServiceError,
    WeakPassword,
)
from pawpal.models.user import ProviderAccount

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{action}"
MIN_PASSWORD_LENGTH = 6

# 소셜 로그인 종류 -> Firebase ID 토큰의 sign_in_provider 값
PROVIDER_KINDS = {
    'google': 'google.com',
    'apple': 'apple.com',
}

# Identity Toolkit 오류 코드 -> 도메인 예외
_REST_ERRORS = {
    'EMAIL_NOT_FOUND': AccountNotFound,
    'INVALID_PASSWORD': InvalidCredential,
    'INVALID_LOGIN_CREDENTIALS': InvalidCredential,
    'INVALID_EMAIL': InvalidCredential,
    'USER_DISABLED': InvalidCredential,
    'INVALID_ID_TOKEN': InvalidCredential,
    'EMAIL_EXISTS': EmailInUse,
    'WEAK_PASSWORD': WeakPassword,
}


class FirebaseIdentityProvider:
    """Firebase Authentication 을 감싸 검증된 ProviderAccount 를 돌려주는 서비스."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def init_app(self, app: Flask):
        self.api_key = self.api_key or app.config.get('FIREBASE_WEB_API_KEY')
        self.timeout = app.config.get('REQUEST_TIMEOUT_SECONDS', self.timeout)
        if not self.api_key:
            logging.warning("FIREBASE_WEB_API_KEY 가 설정되지 않아 비밀번호 로그인을 사용할 수 없습니다.")

    # --- REST ---
    def _post(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ServiceError("인증 서비스가 설정되지 않았습니다.")
        url = IDENTITY_TOOLKIT_URL.format(action=action)
        try:
            response = self.session.post(url, params={'key': self.api_key}, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            logging.error(f"Identity Toolkit {action} 타임아웃: {e}")
            raise NetworkTimeout() from e
        except requests.RequestException as e:
            logging.error(f"Identity Toolkit {action} 요청 실패: {e}", exc_info=True)
            raise ServiceError() from e

        if response.ok:
            return response.json()

        try:
            # 'TOO_MANY_ATTEMPTS_TRY_LATER : ...' 처럼 부가 설명이 붙는 경우가 있음
            error_message = response.json().get('error', {}).get('message', '')
        except ValueError:
            error_message = ''
        code = error_message.split(':')[0].strip()
        error_cls = _REST_ERRORS.get(code)
        if error_cls:
            raise error_cls()
        logging.error(f"Identity Toolkit {action} 실패 (status: {response.status_code}, code: {code})")
        raise ServiceError()

    # --- 계정 ---
    def create_account(self, email: str, password: str, display_name: str) -> ProviderAccount:
        """계정을 생성하고 인증 메일 발송에 필요한 ID 토큰을 얻기 위해 바로 로그인합니다."""
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPassword()
        try:
            record = firebase_auth.create_user(email=email, password=password, display_name=display_name)
        except firebase_auth.EmailAlreadyExistsError as e:
            raise EmailInUse() from e
        except ValueError as e:
            # 이메일 형식 등 SDK 수준 입력 검증 실패
            raise InvalidCredential(str(e)) from e
        except firebase_exceptions.FirebaseError as e:
            logging.error(f"Firebase 계정 생성 실패 ({email}): {e}", exc_info=True)
            raise ServiceError() from e
        logging.info(f"Firebase 계정 생성 완료 (uid: {record.uid})")

        signed_in = self.sign_in_with_password(email, password)
        signed_in.display_name = display_name
        return signed_in

    def sign_in_with_password(self, email: str, password: str) -> ProviderAccount:
        data = self._post('signInWithPassword', {
            'email': email,
            'password': password,
            'returnSecureToken': True
        })
        account = self.get_account(data['localId'])
        if account is None:
            raise AccountNotFound()
        account.id_token = data.get('idToken')
        return account

    def sign_in_with_provider(self, kind: str, id_token: str) -> ProviderAccount:
        """클라이언트가 제공자(Google/Apple) 로그인 후 받은 Firebase ID 토큰을 검증합니다."""
        expected = PROVIDER_KINDS.get(kind)
        if not expected:
            raise InvalidCredential(f"지원하지 않는 로그인 제공자입니다: {kind}")
        try:
            claims = firebase_auth.verify_id_token(id_token)
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            raise InvalidCredential("유효하지 않은 인증 토큰입니다.") from e
        except firebase_exceptions.FirebaseError as e:
            logging.error(f"ID 토큰 검증 실패: {e}", exc_info=True)
            raise ServiceError() from e

        sign_in_provider = (claims.get('firebase') or {}).get('sign_in_provider')
        if sign_in_provider != expected:
            raise InvalidCredential(f"'{kind}' 로그인 토큰이 아닙니다.")

        return ProviderAccount(
            external_id=claims['uid'],
            email=claims.get('email'),
            display_name=claims.get('name'),
            photo_url=claims.get('picture'),
            email_verified=bool(claims.get('email_verified', False)),
            id_token=id_token
        )

    def get_account(self, uid: str) -> Optional[ProviderAccount]:
        try:
            record = firebase_auth.get_user(uid)
        except firebase_auth.UserNotFoundError:
            return None
        except firebase_exceptions.FirebaseError as e:
            logging.error(f"Firebase 계정 조회 실패 (uid: {uid}): {e}", exc_info=True)
            raise ServiceError() from e
        return ProviderAccount(
            external_id=record.uid,
            email=record.email,
            display_name=record.display_name,
            photo_url=record.photo_url,
            email_verified=bool(record.email_verified)
        )

    def update_display_name(self, uid: str, display_name: str) -> None:
        try:
            firebase_auth.update_user(uid, display_name=display_name)
        except firebase_exceptions.FirebaseError as e:
            logging.error(f"Firebase 표시 이름 변경 실패 (uid: {uid}): {e}", exc_info=True)
            raise ServiceError() from e

    def send_verification_email(self, id_token: str) -> None:
        self._post('sendOobCode', {'requestType': 'VERIFY_EMAIL', 'idToken': id_token})
