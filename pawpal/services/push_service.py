# pawpal/services/push_service.py
import logging
from typing import Callable, Dict, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from pawpal.core.errors import ServiceError
from pawpal.services.document_store import DocumentStore

DEFAULT_PUSH_DATA = {"type": "pet-alert"}


class PushService:
    """
    FCM 디바이스 토큰 등록과 푸시 알림 발송을 담당하는 서비스.
    토큰은 users 문서의 fcmTokens 배열에 중복 없이 누적됩니다.
    """
    def __init__(self, store: DocumentStore, sender: Optional[Callable[[messaging.Message], str]] = None):
        self.store = store
        self.sender = sender or messaging.send

    def register_device(self, uid: str, token: str) -> None:
        self.store.set('users', uid, {
            'fcmTokens': self.store.array_union([token]),
            'lastTokenUpdate': self.store.server_timestamp()
        }, merge=True)
        logging.info(f"Registered device token for user {uid}")

    def send(self, token: str, title: str, body: str, data: Optional[Dict[str, str]] = None) -> str:
        """단일 디바이스로 알림을 보내고 FCM 메시지 ID 를 반환합니다. data 가 없으면 기본 pet-alert 유형을 사용합니다."""
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data={str(k): str(v) for k, v in (data or DEFAULT_PUSH_DATA).items()}
        )
        try:
            message_id = self.sender(message)
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            logging.error(f"푸시 알림 발송 실패: {e}", exc_info=True)
            raise ServiceError("알림을 보내지 못했습니다.") from e
        logging.info(f"Successfully sent message: {message_id}")
        return message_id
