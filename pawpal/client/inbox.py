# pawpal/client/inbox.py
import logging
from typing import Any, Dict, List, Optional

from pawpal.client.api_client import PawPalApiClient
from pawpal.client.local_store import KeyValueStore

INBOX_LIMIT = 20


class LocalNotificationInbox:
    """
    최근 알림 최대 20건을 로컬에 보관하는 수신함.
    clear_all 은 로컬 목록만 비우며 서버의 알림 문서는 그대로 남습니다.
    """
    def __init__(self, api: PawPalApiClient, local_store: KeyValueStore, user_id: str, limit: int = INBOX_LIMIT):
        self.api = api
        self.local_store = local_store
        self.key = f"ssp_notifications_{user_id}"
        self.limit = limit

    @property
    def items(self) -> List[Dict[str, Any]]:
        return self.local_store.get(self.key, default=[]) or []

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.items if not n.get('read'))

    def _save(self, items: List[Dict[str, Any]]) -> None:
        self.local_store.set(self.key, items[:self.limit])

    def refresh(self) -> List[Dict[str, Any]]:
        """서버의 최신 알림으로 교체합니다. 서버 결과가 비어 있으면 기존 목록을 유지합니다."""
        remote = self.api.list_notifications(self.limit)
        if remote:
            self._save(remote)
        return self.items

    def push(self, notification: Dict[str, Any]) -> None:
        """실시간 구독으로 받은 알림을 맨 앞에 추가합니다. 같은 ID 는 교체합니다."""
        items = [n for n in self.items if n.get('id') != notification.get('id')]
        self._save([notification] + items)

    def mark_read(self, notification_id: str) -> Optional[Dict[str, Any]]:
        items = self.items
        target = next((n for n in items if n.get('id') == notification_id), None)
        if target is None:
            return None
        target['read'] = True
        self._save(items)
        return self.api.mark_notification_read(notification_id)

    def clear_all(self) -> None:
        self.local_store.set(self.key, [])
        logging.info(f"로컬 알림 수신함을 비웠습니다 ({self.key}).")
