# pawpal/services/notification_service.py
import logging
from typing import Callable, List, Optional

from pawpal.models.notification import Notification, NotificationType
from pawpal.services.document_store import BatchWrite, DocumentStore

NOTIFICATIONS = 'notifications'


class NotificationService:
    """
    알림 관련 비즈니스 로직을 담당하는 공용 서비스 클래스.
    알림은 생성 후 read 플래그만 변경되며, 서버 측에서 삭제하지 않습니다.
    """
    def __init__(self, store: DocumentStore, feed_limit: int = 20):
        self.store = store
        self.feed_limit = feed_limit

    def build(self, recipient_id: str, title: str, message: str,
              n_type: NotificationType = NotificationType.INFO,
              related_id: Optional[str] = None,
              from_user_id: Optional[str] = None,
              from_user_name: Optional[str] = None) -> Notification:
        """저장 전의 알림 객체를 생성합니다. timestamp 는 서버 타임스탬프로 채워집니다."""
        return Notification(
            id='',
            user_id=recipient_id,
            title=title,
            message=message,
            type=n_type,
            read=False,
            timestamp=self.store.server_timestamp(),
            related_id=related_id,
            from_user_id=from_user_id,
            from_user_name=from_user_name
        )

    def as_batch_write(self, notification: Notification) -> BatchWrite:
        """다른 문서 쓰기와 함께 원자적으로 커밋할 수 있도록 알림 생성 작업을 반환합니다."""
        notification.id = self.store.new_id(NOTIFICATIONS)
        return BatchWrite(op='set', path=NOTIFICATIONS, doc_id=notification.id, data=notification.to_dict())

    def create_notification(self, recipient_id: str, title: str, message: str,
                            n_type: NotificationType = NotificationType.INFO,
                            related_id: Optional[str] = None) -> str:
        """
        확인(confirmation) 알림을 생성하여 Firestore 에 저장합니다.

        :param recipient_id: 알림을 받을 사용자 ID
        :param title: 알림 제목
        :param message: 알림 본문
        :param n_type: 알림 유형 (NotificationType Enum)
        :param related_id: 알림의 대상이 되는 문서 ID (pet_id, post_id 등)
        :return: 생성된 알림 문서 ID
        """
        notification = self.build(recipient_id, title, message, n_type, related_id)
        notification_id = self.store.add(NOTIFICATIONS, notification.to_dict())
        logging.info(f"{n_type.value} 알림 생성 완료 -> {recipient_id} (id: {notification_id})")
        return notification_id

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Notification]:
        docs = self.store.query(
            NOTIFICATIONS,
            filters=[('userId', '==', user_id)],
            order_by='timestamp',
            descending=True,
            limit=limit or self.feed_limit
        )
        return [Notification.from_dict(doc) for doc in docs]

    def get(self, notification_id: str) -> Optional[Notification]:
        doc = self.store.get(NOTIFICATIONS, notification_id)
        return Notification.from_dict(doc) if doc else None

    def mark_as_read(self, notification_id: str, user_id: str) -> Optional[Notification]:
        """수신자 본인만 읽음 처리할 수 있습니다. 알림이 없으면 None."""
        notification = self.get(notification_id)
        if not notification:
            return None
        if notification.user_id != user_id:
            raise PermissionError("본인의 알림만 읽음 처리할 수 있습니다.")
        self.store.update(NOTIFICATIONS, notification_id, {'read': True})
        notification.read = True
        return notification

    def watch(self, user_id: str, callback: Callable[[List[Notification]], None]) -> Callable[[], None]:
        """수신자의 최근 알림 목록 변경을 구독합니다. 구독 해제 함수를 반환합니다."""
        return self.store.watch(
            NOTIFICATIONS,
            lambda docs: callback([Notification.from_dict(doc) for doc in docs]),
            filters=[('userId', '==', user_id)],
            order_by='timestamp',
            descending=True,
            limit=self.feed_limit
        )
